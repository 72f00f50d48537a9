"""The HDFS client: server failover, the DataNode redirect dance, and one method per operation

For details on the endpoints, see the Hadoop documentation:

- https://hadoop.apache.org/docs/current/hadoop-project-dist/hadoop-hdfs/WebHDFS.html
- https://hadoop.apache.org/docs/current/hadoop-hdfs-httpfs/index.html
"""

import dataclasses
import getpass
import logging
import os
import posixpath
import re
import shutil
import time
from types import TracebackType
from typing import Any
from typing import Callable
from typing import Dict
from typing import IO
from typing import Iterable
from typing import Iterator
from typing import List
from typing import NoReturn
from typing import Optional
from typing import Tuple
from typing import Type
from typing import Union
from typing import cast
from urllib.parse import quote as url_quote
from urllib.parse import urlunsplit

import requests
import requests.exceptions

from pyhttpfs import operations as ops
from pyhttpfs.decoders import Response
from pyhttpfs.decoders import decode_response
from pyhttpfs.exceptions import HdfsCancelledError
from pyhttpfs.exceptions import HdfsConfigurationError
from pyhttpfs.exceptions import HdfsDecodingError
from pyhttpfs.exceptions import HdfsException
from pyhttpfs.exceptions import HdfsFileNotFoundException
from pyhttpfs.exceptions import HdfsHttpException
from pyhttpfs.exceptions import HdfsHttpStatusException
from pyhttpfs.exceptions import HdfsNoServerException
from pyhttpfs.exceptions import HdfsPreSendHookError
from pyhttpfs.exceptions import HdfsRetriableException
from pyhttpfs.exceptions import HdfsStandbyException
from pyhttpfs.operations import Body
from pyhttpfs.operations import CallContext
from pyhttpfs.operations import Operation
from pyhttpfs.operations import PreSendHook
from pyhttpfs.operations import Request
from pyhttpfs.operations import XAttrSetFlag
from pyhttpfs.operations import XAttrValueEncoding
from pyhttpfs.schemas import BlockLocation
from pyhttpfs.schemas import BlockStoragePolicy
from pyhttpfs.schemas import ContentSummary
from pyhttpfs.schemas import DIRECTORY
from pyhttpfs.schemas import DirectoryListing
from pyhttpfs.schemas import ECPolicy
from pyhttpfs.schemas import FILE
from pyhttpfs.schemas import FileChecksum
from pyhttpfs.schemas import FileStatus
from pyhttpfs.schemas import QuotaUsage
from pyhttpfs.schemas import SYMLINK
from pyhttpfs.schemas import SnapshotDiffReport
from pyhttpfs.schemas import SnapshottableDirectoryStatus
from pyhttpfs.schemas import Token

WEBHDFS = "webhdfs"
HTTPFS = "httpfs"
DEFAULT_PORT = 50070
HTTPFS_DEFAULT_PORT = 14000
WEBHDFS_PATH = "/webhdfs/v1"
XSRF_HEADER = "X-XSRF-HEADER"

_logger = logging.getLogger(__name__)

_DEFAULT_PORTS = {WEBHDFS: DEFAULT_PORT, HTTPFS: HTTPFS_DEFAULT_PORT}
# requests arguments that don't change what gets sent
_ALLOWED_REQUESTS_KWARGS = frozenset(["proxies", "verify", "cert"])
_CONTEXT_KEYS = frozenset(f.name for f in dataclasses.fields(CallContext))
# a standby or starting up NameNode says nothing about the file system
_TRANSIENT_REMOTE_EXCEPTIONS = (HdfsRetriableException, HdfsStandbyException)


class HdfsClient:
    """HDFS client backed by WebHDFS or HttpFS.

    Every operation method takes the documented keyword arguments of its operation plus the fields
    of :py:class:`~pyhttpfs.operations.CallContext`, e.g. ``doas``, ``delegation`` or ``cancel``.

    If multiple HA NameNodes are given, each call tries them one after another, in the given order,
    until one of them gives a good answer. The order is never changed, so a slow first NameNode
    delays every call.

    :param hosts: List of NameNode HTTP host:port strings, either as ``list`` or a comma separated
        string. Port defaults to 50070 for WebHDFS and 14000 for HttpFS if left unspecified.
    :type hosts: list or str
    :param protocol: ``webhdfs`` to follow DataNode redirects, ``httpfs`` to send data directly to
        the given servers.
    :param user_name: What Hadoop user to run as. Defaults to the ``HADOOP_USER_NAME`` environment
        variable if present, otherwise ``getpass.getuser()``. Not sent if a call passes a
        delegation token.
    :param disable_ssl: use ``http`` instead of ``https``
    :param timeout: How long to wait on a single server in seconds before moving on.
    :type timeout: float
    :param xsrf_header: value for the ``X-XSRF-HEADER`` header, needed when the cluster has CSRF
        prevention turned on
    :param close_connection: send ``Connection: close`` with every request
    :param pre_send: called with every prepared request, may return a replacement
    :param requests_session: A ``requests.Session`` object for advanced usage, e.g. with Kerberos
        auth attached. Caller is responsible for closing session. If absent, the client creates a
        session and closes it in :py:meth:`close`.
    :param requests_kwargs: ``proxies``, ``verify`` or ``cert`` to pass to requests
    """

    def __init__(
        self,
        hosts: Union[str, Iterable[str]] = "localhost",
        protocol: str = WEBHDFS,
        user_name: Optional[str] = None,
        disable_ssl: bool = False,
        timeout: float = 20,
        xsrf_header: Optional[str] = None,
        close_connection: bool = False,
        pre_send: Optional[PreSendHook] = None,
        requests_session: Optional[requests.Session] = None,
        requests_kwargs: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Create a new HDFS client"""
        if protocol not in _DEFAULT_PORTS:
            raise HdfsConfigurationError(f"Invalid protocol: {protocol}")
        if timeout <= 0:
            raise HdfsConfigurationError(f"Invalid timeout: {timeout}")
        self.protocol = protocol
        self.hosts: Tuple[str, ...] = tuple(self._parse_hosts(hosts))
        if not self.hosts:
            raise HdfsConfigurationError("No hosts given")
        self.user_name = user_name or os.environ.get(
            "HADOOP_USER_NAME", getpass.getuser()
        )
        self.disable_ssl = disable_ssl
        self.timeout = timeout
        self.xsrf_header = xsrf_header
        self.close_connection = close_connection
        self.pre_send = pre_send
        self._requests_kwargs = dict(requests_kwargs or {})
        for k in self._requests_kwargs:
            if k not in _ALLOWED_REQUESTS_KWARGS:
                raise HdfsConfigurationError(f"Cannot pass requests argument {k}")
        self._owns_session = requests_session is None
        self._requests_session = requests_session or requests.Session()

    def _parse_hosts(self, hosts: Union[str, Iterable[str]]) -> List[str]:
        host_list = re.split(r",|;", hosts) if isinstance(hosts, str) else list(hosts)
        host_list = [host.strip() for host in host_list if host.strip()]
        for i, host in enumerate(host_list):
            if ":" not in host:
                host_list[i] = f"{host:s}:{_DEFAULT_PORTS[self.protocol]:d}"
        return host_list

    @property
    def scheme(self) -> str:
        return "http" if self.disable_ssl else "https"

    def close(self) -> None:
        """Close the session if this client created it"""
        if self._owns_session:
            self._requests_session.close()

    def __enter__(self) -> "HdfsClient":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    def build_url(self, request: Request, host: str) -> str:
        """Return the URL of ``request`` on the given server.

        The path is appended as-is, so a trailing ``/`` survives. ``/a/b/`` and ``/a/b`` are
        different targets to the server.
        """
        path = WEBHDFS_PATH + url_quote(request.raw_path().encode("utf-8"))
        return urlunsplit((self.scheme, host, path, request.raw_query(), ""))

    def _with_defaults(self, request: Request) -> Request:
        """Fill in client level settings that the request didn't set itself"""
        context = request.context
        changes: Dict[str, Any] = {}
        if context.user_name is None and context.delegation is None:
            changes["user_name"] = self.user_name
        if context.xsrf_header is None and self.xsrf_header is not None:
            changes["xsrf_header"] = self.xsrf_header
        if context.close is None and self.close_connection:
            changes["close"] = True
        if context.pre_send is None and self.pre_send is not None:
            changes["pre_send"] = self.pre_send
        request_changes: Dict[str, Any] = {}
        if changes:
            request_changes["context"] = dataclasses.replace(context, **changes)
        if (
            self.protocol == HTTPFS
            and request.op.upload
            and getattr(request, "data", None) is None
        ):
            request_changes["data"] = True
        if not request_changes:
            return request
        return dataclasses.replace(request, **request_changes)

    def execute(self, request: Request) -> Response:
        """Run ``request`` against the configured servers, in order, until one succeeds

        Validation problems are raised before anything is sent. A connection error, a response that
        can't be decoded, or a remote exception moves on to the next server.

        :raises HdfsValidationError: the request is incomplete
        :raises HdfsPreSendHookError: the pre-send hook failed. No other server is tried.
        :raises HdfsCancelledError: the cancel event was set or the deadline passed
        :raises HdfsHttpException: every server failed and at least one of them reported a
            file system error. It is chained to the :py:class:`HdfsNoServerException`.
        :raises HdfsNoServerException: every server failed
        """
        request.validate()
        if not self.hosts:
            raise HdfsConfigurationError("No hosts given")
        request = self._with_defaults(request)
        context = request.context

        params = [(k, v) for k, v in request.query_params() if k != "delegation"]
        formatted_args = " ".join("{}={}".format(*t) for t in params)
        _logger.info(
            "%s %s %s", request.raw_path(), formatted_args, ",".join(self.hosts)
        )
        body: Optional[Body] = getattr(request, "body", None)
        start = _tell(body)
        errors: List[Tuple[str, BaseException]] = []
        for i, host in enumerate(self.hosts):
            log_level = logging.DEBUG if i < len(self.hosts) - 1 else logging.WARNING
            timeout = self._remaining_timeout(context)
            try:
                return self._attempt(request, host, body, start, timeout)
            except (
                requests.exceptions.ChunkedEncodingError,
                requests.exceptions.ConnectionError,
                requests.exceptions.ContentDecodingError,
                requests.exceptions.Timeout,
                HdfsDecodingError,
                HdfsHttpStatusException,
                HdfsHttpException,
            ) as e:
                _logger.log(
                    log_level,
                    "Failed to use %s (attempt %d/%d)",
                    host,
                    i + 1,
                    len(self.hosts),
                    exc_info=True,
                )
                errors.append((host, e))
                if _cancelled(context):
                    raise HdfsCancelledError(
                        f"{request.op.value} cancelled after trying {host}"
                    ) from e
        _raise_exhausted(errors)

    def _remaining_timeout(self, context: CallContext) -> float:
        if context.cancel is not None and context.cancel.is_set():
            raise HdfsCancelledError("Cancelled")
        if context.deadline is None:
            return self.timeout
        remaining = context.deadline - time.monotonic()
        if remaining <= 0:
            raise HdfsCancelledError("Deadline exceeded")
        return min(self.timeout, remaining)

    def _attempt(
        self,
        request: Request,
        host: str,
        body: Optional[Body],
        start: Optional[int],
        timeout: float,
    ) -> Response:
        op = request.op
        context = request.context
        stream = op is Operation.OPEN
        # WebHDFS NameNodes never get the data, it goes to the DataNode in the second hop
        direct = op.upload and self.protocol == HTTPFS
        if direct:
            _rewind(body, start)
        http_response = self._send(
            context,
            op.method,
            self.build_url(request, host),
            body if direct else None,
            timeout,
            stream,
        )
        if (
            op.redirect
            and http_response.is_redirect
            and not getattr(request, "noredirect", None)
        ):
            location = http_response.headers["Location"]
            http_response.close()
            _logger.debug("Following redirect from %s to %s", host, location)
            if op.upload:
                _rewind(body, start)
            http_response = self._send(
                context,
                op.method,
                location,
                body if op.upload else None,
                timeout,
                stream,
            )
        return decode_response(request, http_response, host)

    def _send(
        self,
        context: CallContext,
        method: str,
        url: str,
        data: Optional[Body],
        timeout: float,
        stream: bool,
    ) -> requests.Response:
        headers: Dict[str, str] = {}
        if data is not None:
            headers["Content-Type"] = "application/octet-stream"
        if context.xsrf_header is not None:
            headers[XSRF_HEADER] = context.xsrf_header
        if context.close:
            headers["Connection"] = "close"
        prepared = self._requests_session.prepare_request(
            requests.Request(method, url, data=data, headers=headers)
        )
        if context.pre_send is not None:
            try:
                prepared = context.pre_send(prepared) or prepared
            except Exception as e:
                raise HdfsPreSendHookError(
                    f"pre_send hook failed for {method} {url}"
                ) from e
        settings = self._requests_session.merge_environment_settings(
            prepared.url,
            self._requests_kwargs.get("proxies", {}),
            stream,
            self._requests_kwargs.get("verify"),
            self._requests_kwargs.get("cert"),
        )
        return self._requests_session.send(
            prepared, timeout=timeout, allow_redirects=False, **settings
        )

    def _call(self, cls: Type[Request], **kwargs: Any) -> Any:
        """Build a ``cls`` request from keyword arguments, run it, and return its result"""
        context = kwargs.pop("context", None) or CallContext()
        overrides = {k: kwargs.pop(k) for k in list(kwargs) if k in _CONTEXT_KEYS}
        if overrides:
            context = dataclasses.replace(context, **overrides)
        return self.execute(cls(context=context, **kwargs)).result

    #################################
    # File and Directory Operations #
    #################################

    def create(self, path: str, data: Body, **kwargs: Any) -> Optional[str]:
        """Create a file at the given path.

        :param data: ``bytes`` or a ``file``-like object to upload
        :param overwrite: If a file already exists, should it be overwritten?
        :type overwrite: bool
        :param blocksize: The block size of a file.
        :type blocksize: int
        :param replication: The number of replications of a file.
        :type replication: int
        :param permission: The permission of a file/directory, e.g. ``0o644``
        :type permission: int
        :param buffersize: The size of the buffer used in transferring data.
        :type buffersize: int
        :param noredirect: Don't upload, return the DataNode location instead
        :type noredirect: bool
        :returns: the DataNode location with ``noredirect``, otherwise None
        """
        return cast(
            Optional[str], self._call(ops.Create, path=path, body=data, **kwargs)
        )

    def append(self, path: str, data: Body, **kwargs: Any) -> Optional[str]:
        """Append to the given file.

        :param data: ``bytes`` or a ``file``-like object
        :param buffersize: The size of the buffer used in transferring data.
        :type buffersize: int
        """
        return cast(
            Optional[str], self._call(ops.Append, path=path, body=data, **kwargs)
        )

    def concat(self, target: str, sources: List[str], **kwargs: Any) -> None:
        """Concat existing files together.

        :param target: the path to the target destination.
        :param sources: the paths to the sources to use for the concatenation.
        :type sources: list
        """
        self._call(ops.Concat, path=target, sources=sources, **kwargs)

    def open(self, path: str, **kwargs: Any) -> Union[IO[bytes], str]:
        """Return a file-like object for reading the given HDFS path. The caller closes it.

        :param offset: The starting byte position.
        :type offset: int
        :param length: The number of bytes to be processed.
        :type length: int
        :param buffersize: The size of the buffer used in transferring data.
        :type buffersize: int
        :param noredirect: return the DataNode location instead of the data
        :type noredirect: bool
        """
        return cast(Union[IO[bytes], str], self._call(ops.Open, path=path, **kwargs))

    def mkdirs(self, path: str, **kwargs: Any) -> bool:
        """Create a directory with the provided permission.

        :param permission: The permission of the directory, e.g. ``0o755``
        :type permission: int
        :returns: true if the directory creation succeeds; false otherwise
        """
        return bool(self._call(ops.Mkdirs, path=path, **kwargs))

    def create_symlink(self, link: str, destination: str, **kwargs: Any) -> None:
        """Create a symbolic link at ``link`` pointing to ``destination``.

        :param create_parent: If the parent directories do not exist, should they be created?
        :type create_parent: bool
        :raises HdfsUnsupportedOperationException: symlinks are disabled on most clusters
        """
        self._call(ops.CreateSymlink, path=link, destination=destination, **kwargs)

    def rename(self, path: str, destination: str, **kwargs: Any) -> bool:
        """Renames Path src to Path dst.

        :returns: true if rename is successful
        """
        return bool(
            self._call(ops.Rename, path=path, destination=destination, **kwargs)
        )

    def delete(self, path: str, **kwargs: Any) -> bool:
        """Delete a file.

        Deleting something that doesn't exist is not an error, the result is just false.

        :param recursive: needed to delete a non-empty directory
        :type recursive: bool
        :returns: true if delete is successful else false.
        """
        return bool(self._call(ops.Delete, path=path, **kwargs))

    def truncate(self, path: str, newlength: int, **kwargs: Any) -> bool:
        """Truncate a file to ``newlength`` bytes.

        :returns: true if the file is ready right away, false if block recovery is still going on
        """
        return bool(self._call(ops.Truncate, path=path, newlength=newlength, **kwargs))

    def get_file_status(self, path: str, **kwargs: Any) -> FileStatus:
        """Return a :py:class:`FileStatus` object that represents the path."""
        return cast(FileStatus, self._call(ops.GetFileStatus, path=path, **kwargs))

    def list_status(self, path: str, **kwargs: Any) -> List[FileStatus]:
        """List the statuses of the files/directories in the given path if the path is a directory.

        :rtype: ``list`` of :py:class:`FileStatus` objects
        """
        return cast(List[FileStatus], self._call(ops.ListStatus, path=path, **kwargs))

    def list_status_batch(
        self, path: str, start_after: Optional[str] = None, **kwargs: Any
    ) -> DirectoryListing:
        """One batch of a directory listing, starting after the name ``start_after``"""
        return cast(
            DirectoryListing,
            self._call(
                ops.ListStatusBatch, path=path, start_after=start_after, **kwargs
            ),
        )

    ################################
    # Other File System Operations #
    ################################

    def get_content_summary(self, path: str, **kwargs: Any) -> ContentSummary:
        """Return the :py:class:`ContentSummary` of a given Path."""
        return cast(
            ContentSummary, self._call(ops.GetContentSummary, path=path, **kwargs)
        )

    def get_quota_usage(self, path: str, **kwargs: Any) -> QuotaUsage:
        return cast(QuotaUsage, self._call(ops.GetQuotaUsage, path=path, **kwargs))

    def get_file_checksum(self, path: str, **kwargs: Any) -> FileChecksum:
        """Get the checksum of a file.

        :rtype: :py:class:`FileChecksum`
        """
        return cast(FileChecksum, self._call(ops.GetFileChecksum, path=path, **kwargs))

    def get_home_directory(self, **kwargs: Any) -> str:
        """Return the current user's home directory in this filesystem."""
        return cast(str, self._call(ops.GetHomeDirectory, path="/", **kwargs))

    def get_trash_root(self, path: str, **kwargs: Any) -> str:
        """Return the trash root of the given path, which depends on its encryption zone"""
        return cast(str, self._call(ops.GetTrashRoot, path=path, **kwargs))

    def get_file_block_locations(self, path: str, **kwargs: Any) -> List[BlockLocation]:
        """Where the blocks of a file are

        :param offset: The starting byte position.
        :param length: The number of bytes to be processed.
        """
        return cast(
            List[BlockLocation],
            self._call(ops.GetFileBlockLocations, path=path, **kwargs),
        )

    def set_permission(self, path: str, permission: int, **kwargs: Any) -> None:
        """Set permission of a path.

        :param permission: The permission of a file/directory, e.g. ``0o755``
        """
        self._call(ops.SetPermission, path=path, permission=permission, **kwargs)

    def set_owner(self, path: str, **kwargs: Any) -> None:
        """Set owner of a path (i.e. a file or a directory).

        The parameters owner and group cannot both be null.

        :param owner: user
        :param group: group
        """
        self._call(ops.SetOwner, path=path, **kwargs)

    def set_replication(self, path: str, replication: int, **kwargs: Any) -> bool:
        """Set replication for an existing file.

        :returns: true if successful; false if file does not exist or is a directory
        """
        return bool(
            self._call(ops.SetReplication, path=path, replication=replication, **kwargs)
        )

    def set_times(self, path: str, **kwargs: Any) -> None:
        """Set access time of a file.

        :param modificationtime: milliseconds since the epoch
        :param accesstime: milliseconds since the epoch
        """
        self._call(ops.SetTimes, path=path, **kwargs)

    def check_access(self, path: str, fsaction: str, **kwargs: Any) -> None:
        """Raise :py:class:`HdfsAccessControlException` unless the user may do ``fsaction``

        :param fsaction: a ``rwx`` style action, e.g. ``r-x``
        """
        self._call(ops.CheckAccess, path=path, fsaction=fsaction, **kwargs)

    ##########################################
    # Extended Attributes(XAttrs) Operations #
    ##########################################

    def set_xattr(
        self,
        path: str,
        xattr_name: str,
        xattr_value: Optional[str],
        flag: Union[XAttrSetFlag, str],
        **kwargs: Any,
    ) -> None:
        """Set an xattr of a file or directory.

        :param xattr_name: The name must be prefixed with the namespace followed by ``.``. For
            example, ``user.attr``.
        :param flag: ``CREATE`` or ``REPLACE``
        """
        self._call(
            ops.SetXAttr,
            path=path,
            xattr_name=xattr_name,
            xattr_value=xattr_value,
            flag=flag,
            **kwargs,
        )

    def remove_xattr(self, path: str, xattr_name: str, **kwargs: Any) -> None:
        self._call(ops.RemoveXAttr, path=path, xattr_name=xattr_name, **kwargs)

    def get_xattrs(
        self,
        path: str,
        xattr_name: Union[str, List[str], None] = None,
        encoding: Union[XAttrValueEncoding, str] = XAttrValueEncoding.TEXT,
        **kwargs: Any,
    ) -> Dict[str, Union[bytes, str, None]]:
        """Get one or more xattr values for a file or directory.

        :param xattr_name: ``str`` to get one attribute, ``list`` to get multiple attributes,
            ``None`` to get all attributes.
        :param encoding: ``text`` | ``hex`` | ``base64``, defaults to ``text``

        :returns: Dictionary mapping xattr name to value. With text encoding, the value will be a
            unicode string. With hex or base64 encoding, the value will be a byte array.
        """
        return cast(
            Dict[str, Union[bytes, str, None]],
            self._call(
                ops.GetXAttrs,
                path=path,
                xattr_name=xattr_name,
                encoding=encoding,
                **kwargs,
            ),
        )

    def list_xattrs(self, path: str, **kwargs: Any) -> List[str]:
        """Get all of the xattr names for a file or directory."""
        return cast(List[str], self._call(ops.ListXAttrs, path=path, **kwargs))

    #######################
    # Snapshot Operations #
    #######################

    def allow_snapshot(self, path: str, **kwargs: Any) -> None:
        self._call(ops.AllowSnapshot, path=path, **kwargs)

    def disallow_snapshot(self, path: str, **kwargs: Any) -> None:
        self._call(ops.DisallowSnapshot, path=path, **kwargs)

    def create_snapshot(self, path: str, **kwargs: Any) -> str:
        """Create a snapshot

        :param path: The directory where snapshots will be taken
        :param snapshotname: The name of the snapshot
        :returns: the snapshot path
        """
        return cast(str, self._call(ops.CreateSnapshot, path=path, **kwargs))

    def delete_snapshot(self, path: str, snapshotname: str, **kwargs: Any) -> None:
        """Delete a snapshot of a directory"""
        self._call(ops.DeleteSnapshot, path=path, snapshotname=snapshotname, **kwargs)

    def rename_snapshot(
        self, path: str, oldsnapshotname: str, snapshotname: str, **kwargs: Any
    ) -> None:
        """Rename a snapshot"""
        self._call(
            ops.RenameSnapshot,
            path=path,
            oldsnapshotname=oldsnapshotname,
            snapshotname=snapshotname,
            **kwargs,
        )

    def get_snapshot_diff(
        self, path: str, oldsnapshotname: str, snapshotname: str, **kwargs: Any
    ) -> SnapshotDiffReport:
        """What changed between two snapshots. An empty ``snapshotname`` means the current state."""
        return cast(
            SnapshotDiffReport,
            self._call(
                ops.GetSnapshotDiff,
                path=path,
                oldsnapshotname=oldsnapshotname,
                snapshotname=snapshotname,
                **kwargs,
            ),
        )

    def get_snapshottable_directory_list(
        self, **kwargs: Any
    ) -> List[SnapshottableDirectoryStatus]:
        """Directories the current user can snapshot"""
        return cast(
            List[SnapshottableDirectoryStatus],
            self._call(ops.GetSnapshottableDirectoryList, path="/", **kwargs),
        )

    #############################
    # Storage Policy Operations #
    #############################

    def set_storage_policy(self, path: str, storagepolicy: str, **kwargs: Any) -> None:
        self._call(
            ops.SetStoragePolicy, path=path, storagepolicy=storagepolicy, **kwargs
        )

    def unset_storage_policy(self, path: str, **kwargs: Any) -> None:
        self._call(ops.UnsetStoragePolicy, path=path, **kwargs)

    def get_storage_policy(self, path: str, **kwargs: Any) -> BlockStoragePolicy:
        return cast(
            BlockStoragePolicy, self._call(ops.GetStoragePolicy, path=path, **kwargs)
        )

    def get_all_storage_policy(self, **kwargs: Any) -> List[BlockStoragePolicy]:
        """All storage policies the cluster knows about"""
        return cast(
            List[BlockStoragePolicy],
            self._call(ops.GetAllStoragePolicy, path="/", **kwargs),
        )

    def satisfy_storage_policy(self, path: str, **kwargs: Any) -> None:
        """Ask the cluster to move blocks so they match the path's storage policy"""
        self._call(ops.SatisfyStoragePolicy, path=path, **kwargs)

    #############################
    # Erasure Coding Operations #
    #############################

    def enable_ec_policy(self, ecpolicy: str, **kwargs: Any) -> None:
        self._call(ops.EnableECPolicy, path="/", ecpolicy=ecpolicy, **kwargs)

    def disable_ec_policy(self, ecpolicy: str, **kwargs: Any) -> None:
        self._call(ops.DisableECPolicy, path="/", ecpolicy=ecpolicy, **kwargs)

    def set_ec_policy(self, path: str, ecpolicy: str, **kwargs: Any) -> None:
        """Set an erasure coding policy, e.g. ``RS-6-3-1024k``, on a directory"""
        self._call(ops.SetECPolicy, path=path, ecpolicy=ecpolicy, **kwargs)

    def get_ec_policy(self, path: str, **kwargs: Any) -> ECPolicy:
        return cast(ECPolicy, self._call(ops.GetECPolicy, path=path, **kwargs))

    def unset_ec_policy(self, path: str, **kwargs: Any) -> None:
        self._call(ops.UnsetECPolicy, path=path, **kwargs)

    ###############################
    # Delegation Token Operations #
    ###############################

    def get_delegation_token(self, **kwargs: Any) -> Token:
        """Get a delegation token

        :param renewer: The username of the renewer of a delegation token.
        :param service: The name of a service.
        :param kind: The kind of the delegation token requested.
        """
        return cast(Token, self._call(ops.GetDelegationToken, path="/", **kwargs))

    def renew_delegation_token(self, token: str, **kwargs: Any) -> int:
        """Renew a delegation token

        :returns: the new expiration time, in milliseconds since the epoch
        """
        return cast(
            int, self._call(ops.RenewDelegationToken, path="/", token=token, **kwargs)
        )

    def cancel_delegation_token(self, token: str, **kwargs: Any) -> None:
        self._call(ops.CancelDelegationToken, path="/", token=token, **kwargs)

    ######################################################
    # Convenience Methods                                #
    # These are intended to mimic python / hdfs features #
    ######################################################

    def listdir(self, path: str, **kwargs: Any) -> List[str]:
        """Return a list containing names of files in the given path"""
        statuses = self.list_status(path, **kwargs)
        if (
            len(statuses) == 1
            and statuses[0].pathSuffix == ""
            and not statuses[0].is_dir()
        ):
            raise NotADirectoryError(f"Not a directory: {path!r}")
        return [f.pathSuffix for f in statuses]

    def exists(self, path: str, **kwargs: Any) -> bool:
        """Return true if the given path exists"""
        try:
            self.get_file_status(path, **kwargs)
            return True
        except HdfsFileNotFoundException:
            return False

    def walk(
        self,
        top: str,
        topdown: bool = True,
        onerror: Optional[Callable[[HdfsException], None]] = None,
        **kwargs: Any,
    ) -> Iterator[Tuple[str, List[str], List[str]]]:
        """See ``os.walk`` for documentation. Symlinks are listed with the files."""
        try:
            listing = self.list_status(top, **kwargs)
        except HdfsException as e:
            if onerror is not None:
                onerror(e)
            return

        dirnames, filenames = [], []
        for f in listing:
            if f.type == DIRECTORY:
                dirnames.append(f.pathSuffix)
            elif f.type in (FILE, SYMLINK):
                filenames.append(f.pathSuffix)
            else:  # pragma: no cover
                raise AssertionError(f"Unexpected type {f.type}")

        if topdown:
            yield top, dirnames, filenames
        for name in dirnames:
            new_path = posixpath.join(top, name)
            yield from self.walk(new_path, topdown, onerror, **kwargs)
        if not topdown:
            yield top, dirnames, filenames

    def copy_from_local(self, localsrc: str, dest: str, **kwargs: Any) -> None:
        """Copy a single file from the local file system to ``dest``

        Takes all arguments that :py:meth:`create` takes.
        """
        with open(localsrc, "rb") as f:
            self.create(dest, f, **kwargs)

    def copy_to_local(self, src: str, localdest: str, **kwargs: Any) -> None:
        """Copy a single file from ``src`` to the local file system

        Takes all arguments that :py:meth:`open` takes.
        """
        with cast(IO[bytes], self.open(src, **kwargs)) as fsrc:
            with open(localdest, "wb") as fdst:
                shutil.copyfileobj(fsrc, fdst)

    def get_active_namenode(self, **kwargs: Any) -> str:
        """Return the address of the NameNode that answers requests right now.

        Nothing is cached, every call makes a cheap request.

        :raises HdfsNoServerException: can't find an active NameNode
        """
        return self.execute(
            ops.GetFileStatus(path="/", context=CallContext(**kwargs))
        ).namenode


def _raise_exhausted(errors: List[Tuple[str, BaseException]]) -> NoReturn:
    """Raise the outcome of a call where every server failed

    A file system error from any server wins over connection problems and standby answers, since
    it's what the active NameNode thinks. All failures stay reachable through ``__cause__``.
    """
    aggregate = HdfsNoServerException("Could not use any of the given hosts", errors)
    for _, e in errors:
        if isinstance(e, _TRANSIENT_REMOTE_EXCEPTIONS):
            continue
        if isinstance(e, HdfsHttpException):
            raise e from aggregate
    raise aggregate


def _cancelled(context: CallContext) -> bool:
    if context.cancel is not None and context.cancel.is_set():
        return True
    return context.deadline is not None and context.deadline <= time.monotonic()


def _tell(body: Optional[Body]) -> Optional[int]:
    """Where a re-readable body starts, or None if it can't be rewound"""
    if body is None or isinstance(body, bytes):
        return None
    seekable = getattr(body, "seekable", None)
    if seekable is None or not seekable():
        return None
    return body.tell()


def _rewind(body: Optional[Body], start: Optional[int]) -> None:
    if start is not None:
        cast(IO[bytes], body).seek(start)
