"""Turning HTTP responses into results

Every operation goes through :py:func:`decode_response`, which decides between the raw data path
and the JSON path, and raises the translated ``RemoteException`` when the server reports one. What
to pull out of a successful JSON document is looked up per operation in ``_DECODERS``.
"""

import base64
import binascii
import logging
import warnings
from typing import Any
from typing import Callable
from typing import Dict
from typing import IO
from typing import List
from typing import Optional
from typing import Union
from typing import cast

import requests
import simplejson

from pyhttpfs.exceptions import HdfsDecodingError
from pyhttpfs.exceptions import HdfsHttpStatusException
from pyhttpfs.exceptions import translate_remote_exception
from pyhttpfs.operations import GetXAttrs
from pyhttpfs.operations import Operation
from pyhttpfs.operations import Request
from pyhttpfs.operations import XAttrValueEncoding
from pyhttpfs.schemas import BlockLocation
from pyhttpfs.schemas import BlockStoragePolicy
from pyhttpfs.schemas import ContentSummary
from pyhttpfs.schemas import DirectoryListing
from pyhttpfs.schemas import ECPolicy
from pyhttpfs.schemas import FileChecksum
from pyhttpfs.schemas import FileStatus
from pyhttpfs.schemas import QuotaUsage
from pyhttpfs.schemas import SnapshotDiffReport
from pyhttpfs.schemas import SnapshottableDirectoryStatus
from pyhttpfs.schemas import Token

_logger = logging.getLogger(__name__)

# Never put more than this much of a response body in an error message
MAX_HTTP_BODY_LENGTH_DUMPED = 1024


class Response:
    """What came back from one operation

    :ivar namenode: the server address that produced this response
    :ivar status_code: HTTP status of the final response
    :ivar content_length: ``Content-Length`` if the server sent one
    :ivar content_type: ``Content-Type`` if the server sent one
    :ivar location: DataNode URL, when the server answered with one instead of the data
    :ivar result: the decoded result of the operation
    :ivar body: the unread response stream for ``OPEN``. The caller must close it.
    """

    def __init__(self, namenode: str, http_response: requests.Response) -> None:
        self.namenode = namenode
        self.status_code = http_response.status_code
        self.content_length = _content_length(http_response)
        self.content_type: Optional[str] = http_response.headers.get("Content-Type")
        self.location: Optional[str] = http_response.headers.get("Location")
        self.result: Any = None
        self.body: Optional[IO[bytes]] = None

    def __repr__(self) -> str:
        return "Response(namenode={!r}, status_code={!r}, result={!r})".format(
            self.namenode, self.status_code, self.result
        )


def _content_length(http_response: requests.Response) -> Optional[int]:
    """``Content-Length``, or None when it's missing or malformed"""
    value = http_response.headers.get("Content-Length")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        _logger.debug("Ignoring malformed Content-Length %r", value)
        return None


def is_success(status_code: int) -> bool:
    """OK, Created, Accepted, Non-Authoritative Information, No Content, Reset Content, Partial
    Content"""
    return 200 <= status_code <= 206


def _excerpt(body: bytes) -> str:
    return body[:MAX_HTTP_BODY_LENGTH_DUMPED].decode("utf-8", errors="replace")


def _json(body: bytes) -> Dict[str, Any]:
    try:
        js = simplejson.loads(body)
    except simplejson.JSONDecodeError:
        raise HdfsDecodingError(
            f"Expected JSON. Is WebHDFS enabled? Got {_excerpt(body)!r}"
        )
    if not isinstance(js, dict):
        raise HdfsDecodingError(f"Expected a JSON object, got {_excerpt(body)!r}")
    return js


def decode_response(
    request: Request, http_response: requests.Response, namenode: str
) -> Response:
    """Decode a response to ``request``

    The body is always consumed and closed, except when the raw data stream of an ``OPEN`` is
    handed to the caller.

    :raises HdfsHttpException: the server reported a ``RemoteException``
    :raises HdfsDecodingError: the body isn't what the operation expects
    :raises HdfsHttpStatusException: failure status without a body
    """
    response = Response(namenode, http_response)
    op = request.op
    success = is_success(http_response.status_code)
    if op.redirect and success and not getattr(request, "noredirect", None):
        if op is Operation.OPEN:
            _logger.debug(
                "Streaming %s bytes of %s", response.content_length, request.raw_path()
            )
            response.body = cast(IO[bytes], http_response.raw)
            response.result = http_response.raw
            return response
        if op.upload and response.content_length == 0:
            http_response.close()
            return response
    try:
        body = http_response.content
    finally:
        http_response.close()

    if not body:
        if not success:
            raise HdfsHttpStatusException(
                "unexpected http status code: {} {}".format(
                    http_response.status_code, http_response.reason
                ),
                http_response.status_code,
            )
        if op in _BOOLEAN_OPERATIONS:
            response.result = False
        elif op not in _VOID_OPERATIONS:
            raise HdfsDecodingError(f"Empty response to {op.value}")
        return response

    js = _json(body)
    if "RemoteException" in js:
        raise translate_remote_exception(
            js["RemoteException"], http_response.status_code
        )
    if not success:
        raise HdfsHttpStatusException(
            "unexpected http status code: {} {}, got {!r}".format(
                http_response.status_code, http_response.reason, _excerpt(body)
            ),
            http_response.status_code,
        )
    if op.redirect and "Location" in js:
        response.location = js["Location"]
        if getattr(request, "noredirect", None):
            response.result = response.location
            return response
    try:
        response.result = _DECODERS[op](request, js)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise HdfsDecodingError(
            f"Unexpected {op.value} response {_excerpt(body)!r}: {e!r}"
        )
    return response


_Decoder = Callable[[Request, Dict[str, Any]], Any]


def _void(request: Request, js: Dict[str, Any]) -> None:
    return None


def _boolean(request: Request, js: Dict[str, Any]) -> bool:
    result = js["boolean"]
    if not isinstance(result, bool):
        raise TypeError(f"Expected boolean, got {result!r}")
    return result


def _path(request: Request, js: Dict[str, Any]) -> str:
    result = js["Path"]
    if not isinstance(result, str):
        raise TypeError(f"Expected path, got {result!r}")
    return result


def _long(request: Request, js: Dict[str, Any]) -> int:
    return int(js["long"])


def _file_status(request: Request, js: Dict[str, Any]) -> FileStatus:
    return FileStatus.from_json(js["FileStatus"], request.raw_path())


def _file_statuses(request: Request, js: Dict[str, Any]) -> List[FileStatus]:
    return [
        FileStatus.from_json(item, request.raw_path())
        for item in js["FileStatuses"]["FileStatus"]
    ]


def _directory_listing(request: Request, js: Dict[str, Any]) -> DirectoryListing:
    return DirectoryListing.from_json(js["DirectoryListing"], request.raw_path())


def _block_locations(request: Request, js: Dict[str, Any]) -> List[BlockLocation]:
    locations = js["BlockLocations"]["BlockLocation"]
    return [BlockLocation(**item) for item in locations]


def _storage_policies(request: Request, js: Dict[str, Any]) -> List[BlockStoragePolicy]:
    policies = js["BlockStoragePolicies"]["BlockStoragePolicy"]
    return [BlockStoragePolicy(**item) for item in policies]


def _snapshottable_directories(
    request: Request, js: Dict[str, Any]
) -> List[SnapshottableDirectoryStatus]:
    return [
        SnapshottableDirectoryStatus.from_json(item)
        for item in js["SnapshottableDirectoryList"]
    ]


def _list_xattrs(request: Request, js: Dict[str, Any]) -> List[str]:
    result = simplejson.loads(js["XAttrNames"])
    if not isinstance(result, list):
        raise TypeError(f"Expected list, got {result!r}")
    return result


def _xattrs(request: Request, js: Dict[str, Any]) -> Dict[str, Union[bytes, str, None]]:
    assert isinstance(request, GetXAttrs)
    encoding = XAttrValueEncoding(request.encoding or XAttrValueEncoding.TEXT)
    result: Dict[str, Union[bytes, str, None]] = {}
    for attr in js["XAttrs"]:
        k = attr["name"]
        v = attr.get("value")
        if v is None:
            result[k] = None
        elif encoding == XAttrValueEncoding.TEXT:
            if not (v.startswith('"') and v.endswith('"')):
                raise ValueError(f"Expected quoted text value, got {v!r}")
            result[k] = v[1:-1]
        elif encoding == XAttrValueEncoding.HEX:
            if not v.startswith("0x"):
                raise ValueError(f"Expected hex value, got {v!r}")
            result[k] = binascii.unhexlify(v[2:])
        elif encoding == XAttrValueEncoding.BASE64:
            if not v.startswith("0s"):
                raise ValueError(f"Expected base64 value, got {v!r}")
            result[k] = base64.b64decode(v[2:])
        else:  # pragma: no cover
            warnings.warn(f"Unexpected encoding {encoding}")
            result[k] = v
    return result


def _record(key: str, factory: Callable[..., Any]) -> _Decoder:
    def decode(request: Request, js: Dict[str, Any]) -> Any:
        data = js[key]
        from_json = getattr(factory, "from_json", None)
        if from_json is not None:
            return from_json(data)
        return factory(**data)

    return decode


_DECODERS: Dict[Operation, _Decoder] = {
    Operation.CREATE: _void,
    Operation.APPEND: _void,
    Operation.OPEN: _void,
    Operation.GETFILECHECKSUM: _record("FileChecksum", FileChecksum),
    Operation.MKDIRS: _boolean,
    Operation.CREATESYMLINK: _void,
    Operation.RENAME: _boolean,
    Operation.DELETE: _boolean,
    Operation.TRUNCATE: _boolean,
    Operation.CONCAT: _void,
    Operation.GETFILESTATUS: _file_status,
    Operation.LISTSTATUS: _file_statuses,
    Operation.LISTSTATUS_BATCH: _directory_listing,
    Operation.GETCONTENTSUMMARY: _record("ContentSummary", ContentSummary),
    Operation.GETQUOTAUSAGE: _record("QuotaUsage", QuotaUsage),
    Operation.GETHOMEDIRECTORY: _path,
    Operation.GETTRASHROOT: _path,
    Operation.GETFILEBLOCKLOCATIONS: _block_locations,
    Operation.SETPERMISSION: _void,
    Operation.SETOWNER: _void,
    Operation.SETREPLICATION: _boolean,
    Operation.SETTIMES: _void,
    Operation.CHECKACCESS: _void,
    Operation.SETXATTR: _void,
    Operation.REMOVEXATTR: _void,
    Operation.GETXATTRS: _xattrs,
    Operation.LISTXATTRS: _list_xattrs,
    Operation.ALLOWSNAPSHOT: _void,
    Operation.DISALLOWSNAPSHOT: _void,
    Operation.CREATESNAPSHOT: _path,
    Operation.DELETESNAPSHOT: _void,
    Operation.RENAMESNAPSHOT: _void,
    Operation.GETSNAPSHOTDIFF: _record("SnapshotDiffReport", SnapshotDiffReport),
    Operation.GETSNAPSHOTTABLEDIRECTORYLIST: _snapshottable_directories,
    Operation.SETSTORAGEPOLICY: _void,
    Operation.UNSETSTORAGEPOLICY: _void,
    Operation.GETSTORAGEPOLICY: _record("BlockStoragePolicy", BlockStoragePolicy),
    Operation.GETALLSTORAGEPOLICY: _storage_policies,
    Operation.SATISFYSTORAGEPOLICY: _void,
    Operation.ENABLEECPOLICY: _void,
    Operation.DISABLEECPOLICY: _void,
    Operation.SETECPOLICY: _void,
    Operation.GETECPOLICY: _record("ECPolicy", ECPolicy),
    Operation.UNSETECPOLICY: _void,
    Operation.GETDELEGATIONTOKEN: _record("Token", Token),
    Operation.RENEWDELEGATIONTOKEN: _long,
    Operation.CANCELDELEGATIONTOKEN: _void,
}
assert set(_DECODERS) == set(Operation), set(Operation) - set(_DECODERS)

_BOOLEAN_OPERATIONS = frozenset(op for op, d in _DECODERS.items() if d is _boolean)
_VOID_OPERATIONS = frozenset(op for op, d in _DECODERS.items() if d is _void)
