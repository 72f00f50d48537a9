"""Request descriptors, one per WebHDFS operation

A descriptor knows the path it targets, the ``op`` it sends, and how to encode its own query string.
Only parameters that were actually set are sent: ``None`` means "leave it to the server", while
``False`` and ``0`` are sent as-is.

>>> Mkdirs(path="/tmp/x", permission=0o755).raw_query()
'op=MKDIRS&permission=0755'
"""

import enum
import threading
from dataclasses import dataclass
from dataclasses import field
from dataclasses import fields
from typing import Any
from typing import Callable
from typing import ClassVar
from typing import Dict
from typing import IO
from typing import List
from typing import Optional
from typing import Tuple
from typing import Union
from urllib.parse import urlencode

import requests

from pyhttpfs.exceptions import HdfsValidationError
from pyhttpfs.exceptions import MissingRequiredField

PreSendHook = Callable[[requests.PreparedRequest], requests.PreparedRequest]
Body = Union[bytes, IO[bytes]]


class Operation(enum.Enum):
    """Every ``op`` the client knows how to send

    Each member carries the HTTP method, whether the server may answer by redirecting to a
    DataNode, and whether the request uploads a body.
    """

    method: str
    redirect: bool
    upload: bool

    def __new__(
        cls, value: str, method: str, redirect: bool = False, upload: bool = False
    ) -> "Operation":
        obj = object.__new__(cls)
        obj._value_ = value
        obj.method = method
        obj.redirect = redirect
        obj.upload = upload
        return obj

    # Data transfer
    CREATE = "CREATE", "PUT", True, True
    APPEND = "APPEND", "POST", True, True
    OPEN = "OPEN", "GET", True
    GETFILECHECKSUM = "GETFILECHECKSUM", "GET", True

    # File and directory operations
    MKDIRS = "MKDIRS", "PUT"
    CREATESYMLINK = "CREATESYMLINK", "PUT"
    RENAME = "RENAME", "PUT"
    DELETE = "DELETE", "DELETE"
    TRUNCATE = "TRUNCATE", "POST"
    CONCAT = "CONCAT", "POST"
    GETFILESTATUS = "GETFILESTATUS", "GET"
    LISTSTATUS = "LISTSTATUS", "GET"
    LISTSTATUS_BATCH = "LISTSTATUS_BATCH", "GET"

    # Other file system operations
    GETCONTENTSUMMARY = "GETCONTENTSUMMARY", "GET"
    GETQUOTAUSAGE = "GETQUOTAUSAGE", "GET"
    GETHOMEDIRECTORY = "GETHOMEDIRECTORY", "GET"
    GETTRASHROOT = "GETTRASHROOT", "GET"
    GETFILEBLOCKLOCATIONS = "GETFILEBLOCKLOCATIONS", "GET"
    SETPERMISSION = "SETPERMISSION", "PUT"
    SETOWNER = "SETOWNER", "PUT"
    SETREPLICATION = "SETREPLICATION", "PUT"
    SETTIMES = "SETTIMES", "PUT"
    CHECKACCESS = "CHECKACCESS", "GET"

    # Extended attributes
    SETXATTR = "SETXATTR", "PUT"
    REMOVEXATTR = "REMOVEXATTR", "PUT"
    GETXATTRS = "GETXATTRS", "GET"
    LISTXATTRS = "LISTXATTRS", "GET"

    # Snapshots
    ALLOWSNAPSHOT = "ALLOWSNAPSHOT", "PUT"
    DISALLOWSNAPSHOT = "DISALLOWSNAPSHOT", "PUT"
    CREATESNAPSHOT = "CREATESNAPSHOT", "PUT"
    DELETESNAPSHOT = "DELETESNAPSHOT", "DELETE"
    RENAMESNAPSHOT = "RENAMESNAPSHOT", "PUT"
    GETSNAPSHOTDIFF = "GETSNAPSHOTDIFF", "GET"
    GETSNAPSHOTTABLEDIRECTORYLIST = "GETSNAPSHOTTABLEDIRECTORYLIST", "GET"

    # Storage policies
    SETSTORAGEPOLICY = "SETSTORAGEPOLICY", "PUT"
    UNSETSTORAGEPOLICY = "UNSETSTORAGEPOLICY", "POST"
    GETSTORAGEPOLICY = "GETSTORAGEPOLICY", "GET"
    GETALLSTORAGEPOLICY = "GETALLSTORAGEPOLICY", "GET"
    SATISFYSTORAGEPOLICY = "SATISFYSTORAGEPOLICY", "PUT"

    # Erasure coding
    ENABLEECPOLICY = "ENABLEECPOLICY", "PUT"
    DISABLEECPOLICY = "DISABLEECPOLICY", "PUT"
    SETECPOLICY = "SETECPOLICY", "PUT"
    GETECPOLICY = "GETECPOLICY", "GET"
    UNSETECPOLICY = "UNSETECPOLICY", "POST"

    # Delegation tokens
    GETDELEGATIONTOKEN = "GETDELEGATIONTOKEN", "GET"
    RENEWDELEGATIONTOKEN = "RENEWDELEGATIONTOKEN", "PUT"
    CANCELDELEGATIONTOKEN = "CANCELDELEGATIONTOKEN", "PUT"


@dataclass
class CallContext:
    """Settings shared by every operation

    :param delegation: delegation token used for authentication
    :param user_name: the authenticated user, sent as ``user.name``
    :param doas: proxy as this user
    :param xsrf_header: value of the ``X-XSRF-HEADER`` header, for clusters with CSRF prevention
    :param close: ask the server to close the connection after the response
    :param pre_send: called with every prepared request before it is sent, and may return a
        replacement. If it raises, the call fails without trying other servers.
    :param cancel: once set, the call stops at the next server boundary
    :param deadline: ``time.monotonic()`` value past which the call gives up
    """

    delegation: Optional[str] = None
    user_name: Optional[str] = None
    doas: Optional[str] = None
    xsrf_header: Optional[str] = None
    close: Optional[bool] = None
    pre_send: Optional[PreSendHook] = None
    cancel: Optional[threading.Event] = None
    deadline: Optional[float] = None

    def query_params(self) -> List[Tuple[str, str]]:
        params = []
        for key, value in (
            ("delegation", self.delegation),
            ("user.name", self.user_name),
            ("doas", self.doas),
        ):
            if value is not None:
                params.append((key, value))
        return params


def _encode(value: Any) -> Union[str, List[str]]:
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return str(value)


def _octal(value: int) -> str:
    return f"0{value:o}" if value else "0"


def _comma_separated(value: List[str]) -> str:
    return ",".join(value)


def _param(
    key: str,
    required: bool = False,
    encoder: Optional[Callable[[Any], Union[str, List[str]]]] = None,
) -> Any:
    return field(
        default=None,
        metadata={"query": key, "required": required, "encoder": encoder or _encode},
    )


@dataclass
class Request:
    """Base of every request descriptor

    :param path: absolute path of the object the operation works on
    :param context: authentication and transport settings, see :py:class:`CallContext`
    """

    op: ClassVar[Operation]
    path_required: ClassVar[bool] = True

    path: Optional[str] = None
    context: CallContext = field(default_factory=CallContext)

    def validate(self) -> None:
        """Raise :py:class:`HdfsValidationError` if the request can't be sent"""
        if self.path is None:
            if self.path_required:
                raise MissingRequiredField(self.op.value, "path")
        elif not self.path.startswith("/"):
            raise HdfsValidationError(f"Path must be absolute, was given {self.path}")
        for f in fields(self):
            if f.metadata.get("required") and getattr(self, f.name) is None:
                raise MissingRequiredField(self.op.value, f.name)

    def raw_path(self) -> str:
        """The path, verbatim. A trailing ``/`` is significant to the server."""
        return self.path or ""

    def query_params(self) -> List[Tuple[str, str]]:
        params = [("op", self.op.value)]
        params.extend(self.context.query_params())
        for f in fields(self):
            key = f.metadata.get("query")
            value = getattr(self, f.name)
            if key is None or value is None:
                continue
            encoded = f.metadata["encoder"](value)
            if isinstance(encoded, list):
                params.extend((key, v) for v in encoded)
            else:
                params.append((key, encoded))
        return params

    def raw_query(self) -> str:
        return urlencode(self.query_params())


#################################
# File and Directory Operations #
#################################


@dataclass
class Create(Request):
    """Create a file

    ``data`` is only sent by HttpFS, which expects the file contents in the same request.
    """

    op = Operation.CREATE

    body: Optional[Body] = None
    overwrite: Optional[bool] = _param("overwrite")
    blocksize: Optional[int] = _param("blocksize")
    replication: Optional[int] = _param("replication")
    permission: Optional[int] = _param("permission", encoder=_octal)
    buffersize: Optional[int] = _param("buffersize")
    noredirect: Optional[bool] = _param("noredirect")
    data: Optional[bool] = _param("data")


@dataclass
class Append(Request):
    op = Operation.APPEND

    body: Optional[Body] = None
    buffersize: Optional[int] = _param("buffersize")
    noredirect: Optional[bool] = _param("noredirect")
    data: Optional[bool] = _param("data")


@dataclass
class Open(Request):
    op = Operation.OPEN

    offset: Optional[int] = _param("offset")
    length: Optional[int] = _param("length")
    buffersize: Optional[int] = _param("buffersize")
    noredirect: Optional[bool] = _param("noredirect")


@dataclass
class GetFileChecksum(Request):
    op = Operation.GETFILECHECKSUM

    noredirect: Optional[bool] = _param("noredirect")


@dataclass
class Mkdirs(Request):
    op = Operation.MKDIRS

    permission: Optional[int] = _param("permission", encoder=_octal)


@dataclass
class CreateSymlink(Request):
    op = Operation.CREATESYMLINK

    destination: Optional[str] = _param("destination", required=True)
    create_parent: Optional[bool] = _param("createParent")


@dataclass
class Rename(Request):
    op = Operation.RENAME

    destination: Optional[str] = _param("destination", required=True)


@dataclass
class Delete(Request):
    op = Operation.DELETE

    recursive: Optional[bool] = _param("recursive")


@dataclass
class Truncate(Request):
    op = Operation.TRUNCATE

    newlength: Optional[int] = _param("newlength", required=True)


@dataclass
class Concat(Request):
    op = Operation.CONCAT

    sources: Optional[List[str]] = _param(
        "sources", required=True, encoder=_comma_separated
    )

    def validate(self) -> None:
        super().validate()
        if not isinstance(self.sources, list):
            raise HdfsValidationError("sources should be a list")
        if any("," in s for s in self.sources):
            raise HdfsValidationError("WebHDFS does not support commas in concat")


@dataclass
class GetFileStatus(Request):
    op = Operation.GETFILESTATUS


@dataclass
class ListStatus(Request):
    op = Operation.LISTSTATUS


@dataclass
class ListStatusBatch(Request):
    op = Operation.LISTSTATUS_BATCH

    start_after: Optional[str] = _param("startAfter")


################################
# Other File System Operations #
################################


@dataclass
class GetContentSummary(Request):
    op = Operation.GETCONTENTSUMMARY


@dataclass
class GetQuotaUsage(Request):
    op = Operation.GETQUOTAUSAGE


@dataclass
class GetHomeDirectory(Request):
    op = Operation.GETHOMEDIRECTORY
    path_required = False


@dataclass
class GetTrashRoot(Request):
    op = Operation.GETTRASHROOT


@dataclass
class GetFileBlockLocations(Request):
    op = Operation.GETFILEBLOCKLOCATIONS

    offset: Optional[int] = _param("offset")
    length: Optional[int] = _param("length")


@dataclass
class SetPermission(Request):
    op = Operation.SETPERMISSION

    permission: Optional[int] = _param("permission", encoder=_octal)


@dataclass
class SetOwner(Request):
    op = Operation.SETOWNER

    owner: Optional[str] = _param("owner")
    group: Optional[str] = _param("group")


@dataclass
class SetReplication(Request):
    op = Operation.SETREPLICATION

    replication: Optional[int] = _param("replication", required=True)


@dataclass
class SetTimes(Request):
    op = Operation.SETTIMES

    modificationtime: Optional[int] = _param("modificationtime")
    accesstime: Optional[int] = _param("accesstime")


@dataclass
class CheckAccess(Request):
    op = Operation.CHECKACCESS

    fsaction: Optional[str] = _param("fsaction", required=True)


##########################################
# Extended Attributes(XAttrs) Operations #
##########################################


class XAttrSetFlag(str, enum.Enum):
    CREATE = "CREATE"
    REPLACE = "REPLACE"


class XAttrValueEncoding(str, enum.Enum):
    TEXT = "text"
    HEX = "hex"
    BASE64 = "base64"


def _enum_value(value: Any) -> str:
    return str(value.value if isinstance(value, enum.Enum) else value)


@dataclass
class SetXAttr(Request):
    op = Operation.SETXATTR

    xattr_name: Optional[str] = _param("xattr.name", required=True)
    xattr_value: Optional[str] = _param("xattr.value")
    flag: Optional[Union[XAttrSetFlag, str]] = _param(
        "flag", required=True, encoder=_enum_value
    )


@dataclass
class RemoveXAttr(Request):
    op = Operation.REMOVEXATTR

    xattr_name: Optional[str] = _param("xattr.name", required=True)


@dataclass
class GetXAttrs(Request):
    """Get some or all xattrs. ``xattr_name`` may be a single name or a list of names."""

    op = Operation.GETXATTRS

    xattr_name: Optional[Union[str, List[str]]] = _param("xattr.name")
    encoding: Optional[Union[XAttrValueEncoding, str]] = _param(
        "encoding", encoder=_enum_value
    )


@dataclass
class ListXAttrs(Request):
    op = Operation.LISTXATTRS


#######################
# Snapshot Operations #
#######################


@dataclass
class AllowSnapshot(Request):
    op = Operation.ALLOWSNAPSHOT


@dataclass
class DisallowSnapshot(Request):
    op = Operation.DISALLOWSNAPSHOT


@dataclass
class CreateSnapshot(Request):
    op = Operation.CREATESNAPSHOT

    snapshotname: Optional[str] = _param("snapshotname")


@dataclass
class DeleteSnapshot(Request):
    op = Operation.DELETESNAPSHOT

    snapshotname: Optional[str] = _param("snapshotname", required=True)


@dataclass
class RenameSnapshot(Request):
    op = Operation.RENAMESNAPSHOT

    oldsnapshotname: Optional[str] = _param("oldsnapshotname", required=True)
    snapshotname: Optional[str] = _param("snapshotname", required=True)


@dataclass
class GetSnapshotDiff(Request):
    op = Operation.GETSNAPSHOTDIFF

    oldsnapshotname: Optional[str] = _param("oldsnapshotname", required=True)
    snapshotname: Optional[str] = _param("snapshotname", required=True)


@dataclass
class GetSnapshottableDirectoryList(Request):
    op = Operation.GETSNAPSHOTTABLEDIRECTORYLIST
    path_required = False


#############################
# Storage Policy Operations #
#############################


@dataclass
class SetStoragePolicy(Request):
    op = Operation.SETSTORAGEPOLICY

    storagepolicy: Optional[str] = _param("storagepolicy", required=True)


@dataclass
class UnsetStoragePolicy(Request):
    op = Operation.UNSETSTORAGEPOLICY


@dataclass
class GetStoragePolicy(Request):
    op = Operation.GETSTORAGEPOLICY


@dataclass
class GetAllStoragePolicy(Request):
    op = Operation.GETALLSTORAGEPOLICY
    path_required = False


@dataclass
class SatisfyStoragePolicy(Request):
    op = Operation.SATISFYSTORAGEPOLICY


#############################
# Erasure Coding Operations #
#############################


@dataclass
class EnableECPolicy(Request):
    op = Operation.ENABLEECPOLICY
    path_required = False

    ecpolicy: Optional[str] = _param("ecpolicy", required=True)


@dataclass
class DisableECPolicy(Request):
    op = Operation.DISABLEECPOLICY
    path_required = False

    ecpolicy: Optional[str] = _param("ecpolicy", required=True)


@dataclass
class SetECPolicy(Request):
    op = Operation.SETECPOLICY

    ecpolicy: Optional[str] = _param("ecpolicy", required=True)


@dataclass
class GetECPolicy(Request):
    op = Operation.GETECPOLICY


@dataclass
class UnsetECPolicy(Request):
    op = Operation.UNSETECPOLICY


###############################
# Delegation Token Operations #
###############################


@dataclass
class GetDelegationToken(Request):
    op = Operation.GETDELEGATIONTOKEN
    path_required = False

    renewer: Optional[str] = _param("renewer")
    service: Optional[str] = _param("service")
    kind: Optional[str] = _param("kind")


@dataclass
class RenewDelegationToken(Request):
    op = Operation.RENEWDELEGATIONTOKEN
    path_required = False

    token: Optional[str] = _param("token", required=True)


@dataclass
class CancelDelegationToken(Request):
    op = Operation.CANCELDELEGATIONTOKEN
    path_required = False

    token: Optional[str] = _param("token", required=True)


REQUEST_CLASSES: Dict[Operation, type] = {
    cls.op: cls
    for cls in list(globals().values())
    if isinstance(cls, type) and issubclass(cls, Request) and cls is not Request
}
assert set(REQUEST_CLASSES) == set(Operation), set(Operation) - set(REQUEST_CLASSES)
