import errno
import io
from typing import Any
from typing import Dict
from typing import Optional

import pytest
import requests
import simplejson

from pyhttpfs.decoders import MAX_HTTP_BODY_LENGTH_DUMPED
from pyhttpfs.decoders import decode_response
from pyhttpfs.exceptions import HdfsAccessControlException
from pyhttpfs.exceptions import HdfsDecodingError
from pyhttpfs.exceptions import HdfsFileAlreadyExistsException
from pyhttpfs.exceptions import HdfsFileNotFoundException
from pyhttpfs.exceptions import HdfsHttpException
from pyhttpfs.exceptions import HdfsHttpStatusException
from pyhttpfs.exceptions import HdfsPathIsNotEmptyDirectoryException
from pyhttpfs.exceptions import HdfsSnapshotException
from pyhttpfs.exceptions import translate_remote_exception
from pyhttpfs.operations import Create
from pyhttpfs.operations import Delete
from pyhttpfs.operations import GetContentSummary
from pyhttpfs.operations import GetFileChecksum
from pyhttpfs.operations import GetFileStatus
from pyhttpfs.operations import GetSnapshotDiff
from pyhttpfs.operations import GetXAttrs
from pyhttpfs.operations import ListStatus
from pyhttpfs.operations import ListStatusBatch
from pyhttpfs.operations import ListXAttrs
from pyhttpfs.operations import Mkdirs
from pyhttpfs.operations import Open
from pyhttpfs.operations import SetOwner
from pyhttpfs.operations import XAttrValueEncoding
from pyhttpfs.schemas import DiffReportEntry
from pyhttpfs.schemas import FileChecksum
from pyhttpfs.schemas import FileStatus
from pyhttpfs.schemas import TypeQuota

NAMENODE = "nn:50070"

DIRECTORY_STATUS = {
    "accessTime": 0,
    "blockSize": 0,
    "childrenNum": 1,
    "fileId": 16389,
    "group": "supergroup",
    "length": 0,
    "modificationTime": 1320173277227,
    "owner": "webuser",
    "pathSuffix": "",
    "permission": "755",
    "replication": 0,
    "storagePolicy": 0,
    "type": "DIRECTORY",
}


def _http_response(
    status_code: int,
    json: Any = None,
    body: bytes = b"",
    headers: Optional[Dict[str, str]] = None,
) -> requests.Response:
    if json is not None:
        body = simplejson.dumps(json).encode("utf-8")
    response = requests.Response()
    response.status_code = status_code
    response.reason = "Reason"
    response.raw = io.BytesIO(body)
    response.headers["Content-Length"] = str(len(body))
    response.headers.update(headers or {})
    return response


def test_file_not_found() -> None:
    http_response = _http_response(
        404,
        {
            "RemoteException": {
                "exception": "FileNotFoundException",
                "javaClassName": "java.io.FileNotFoundException",
                "message": "File does not exist: /nothing",
            }
        },
    )
    with pytest.raises(FileNotFoundError) as exc_info:
        decode_response(GetFileStatus(path="/nothing"), http_response, NAMENODE)
    e = exc_info.value
    assert isinstance(e, HdfsFileNotFoundException)
    assert e.errno == errno.ENOENT
    assert e.status_code == 404
    assert e.message == "File does not exist: /nothing"
    assert e.javaClassName == "java.io.FileNotFoundException"


def test_remote_exception_kinds() -> None:
    e = translate_remote_exception(
        {
            "exception": "AccessControlException",
            "javaClassName": "org.apache.hadoop.security.AccessControlException",
            "message": "Permission denied: user=tester, access=WRITE",
        },
        403,
    )
    assert isinstance(e, HdfsAccessControlException)
    assert isinstance(e, PermissionError)
    assert e.errno == errno.EACCES

    e = translate_remote_exception(
        {"exception": "FileAlreadyExistsException", "message": "/f already exists"},
        403,
    )
    assert isinstance(e, HdfsFileAlreadyExistsException)
    assert isinstance(e, FileExistsError)
    assert e.errno == errno.EEXIST

    e = translate_remote_exception(
        {
            "exception": "PathIsNotEmptyDirectoryException",
            "javaClassName": "org.apache.hadoop.fs.PathIsNotEmptyDirectoryException",
            "message": "/d is non empty",
        },
        403,
    )
    assert isinstance(e, HdfsPathIsNotEmptyDirectoryException)
    assert not isinstance(e, FileExistsError)
    assert e.errno == errno.ENOTEMPTY


def test_java_class_name_wins() -> None:
    """The short name is only a fallback for servers that don't send the class"""
    e = translate_remote_exception(
        {
            "exception": "IOException",
            "javaClassName": "org.apache.hadoop.hdfs.protocol.SnapshotException",
            "message": "Directory is not a snapshottable directory: /d",
        },
        403,
    )
    assert type(e) is HdfsSnapshotException


def test_unrecognized_exception() -> None:
    """An exception that we don't have a python class for should still work"""
    e = translate_remote_exception(
        {
            "exception": "SomeUnknownException",
            "javaClassName": "org.apache.hadoop.SomeUnknownException",
            "message": "some_test_msg",
            "newThing": "1",
        },
        400,
    )
    assert type(e) is HdfsHttpException
    assert e.exception == "SomeUnknownException"
    assert e.message == "some_test_msg"
    assert e.args[0] == "SomeUnknownException - some_test_msg"
    assert e.newThing == "1"  # type: ignore[attr-defined]


def test_permission_is_decoded_from_octal() -> None:
    response = decode_response(
        GetFileStatus(path="/d"),
        _http_response(200, {"FileStatus": DIRECTORY_STATUS}),
        NAMENODE,
    )
    status = response.result
    assert isinstance(status, FileStatus)
    assert status.permission == 0o755
    assert str(status.permission) == "755"
    assert status.mode == 0o40755
    assert status.is_dir()
    assert status.name == "d"
    assert status["storagePolicy"] == 0
    assert response.namenode == NAMENODE
    assert response.status_code == 200


def test_open_streams_the_body() -> None:
    """Bytes from OPEN are not JSON and must not be read"""
    http_response = _http_response(
        200, body=b"{not json", headers={"Content-Type": "application/octet-stream"}
    )
    response = decode_response(Open(path="/f"), http_response, NAMENODE)
    assert response.body is http_response.raw
    assert response.content_length == 9
    assert response.content_type == "application/octet-stream"
    assert response.result.read() == b"{not json"


def test_decoding_error_excerpt() -> None:
    body = b"<html>" + b"x" * (2 * MAX_HTTP_BODY_LENGTH_DUMPED)
    with pytest.raises(HdfsDecodingError) as exc_info:
        decode_response(
            GetFileStatus(path="/"), _http_response(200, body=body), NAMENODE
        )
    message = str(exc_info.value)
    assert "<html>" in message
    assert len(message) < MAX_HTTP_BODY_LENGTH_DUMPED + 100


def test_unexpected_json() -> None:
    with pytest.raises(HdfsDecodingError):
        decode_response(GetFileStatus(path="/"), _http_response(200, [1]), NAMENODE)
    with pytest.raises(HdfsDecodingError):
        decode_response(Mkdirs(path="/d"), _http_response(200, {"x": 1}), NAMENODE)


def test_empty_body() -> None:
    response = decode_response(Delete(path="/f"), _http_response(200), NAMENODE)
    assert response.result is False
    response = decode_response(SetOwner(path="/f"), _http_response(200), NAMENODE)
    assert response.result is None
    with pytest.raises(HdfsDecodingError):
        decode_response(GetFileStatus(path="/f"), _http_response(200), NAMENODE)
    with pytest.raises(HdfsHttpStatusException) as exc_info:
        decode_response(SetOwner(path="/f"), _http_response(500), NAMENODE)
    assert exc_info.value.status_code == 500


def test_failure_status_without_remote_exception() -> None:
    with pytest.raises(HdfsHttpStatusException) as exc_info:
        decode_response(
            Mkdirs(path="/d"), _http_response(502, {"boolean": True}), NAMENODE
        )
    assert exc_info.value.status_code == 502


def test_list_status() -> None:
    js = {
        "FileStatuses": {
            "FileStatus": [
                dict(DIRECTORY_STATUS, pathSuffix="a"),
                dict(DIRECTORY_STATUS, pathSuffix="b", type="FILE", permission="644"),
            ]
        }
    }
    statuses = decode_response(
        ListStatus(path="/d"), _http_response(200, js), NAMENODE
    ).result
    assert [s.name for s in statuses] == ["a", "b"]
    assert [s.mode for s in statuses] == [0o40755, 0o100644]


def test_list_status_batch() -> None:
    js = {
        "DirectoryListing": {
            "partialListing": {
                "FileStatuses": {"FileStatus": [dict(DIRECTORY_STATUS, pathSuffix="a")]}
            },
            "remainingEntries": 2,
        }
    }
    listing = decode_response(
        ListStatusBatch(path="/d", start_after="0"), _http_response(200, js), NAMENODE
    ).result
    assert listing.remainingEntries == 2
    assert [s.name for s in listing.partialListing] == ["a"]


def test_content_summary() -> None:
    js = {
        "ContentSummary": {
            "directoryCount": 2,
            "fileCount": 1,
            "length": 24930,
            "quota": -1,
            "spaceConsumed": 24930,
            "spaceQuota": -1,
            "typeQuota": {"ARCHIVE": {"consumed": 500, "quota": 10000}},
        }
    }
    summary = decode_response(
        GetContentSummary(path="/d"), _http_response(200, js), NAMENODE
    ).result
    assert summary.fileCount == 1
    assert summary.typeQuota == {"ARCHIVE": TypeQuota(consumed=500, quota=10000)}


def test_snapshot_diff() -> None:
    js = {
        "SnapshotDiffReport": {
            "diffList": [{"sourcePath": "", "type": "MODIFY"}],
            "fromSnapshot": "s3",
            "snapshotRoot": "/foo",
            "toSnapshot": "s4",
        }
    }
    report = decode_response(
        GetSnapshotDiff(path="/foo", oldsnapshotname="s3", snapshotname="s4"),
        _http_response(200, js),
        NAMENODE,
    ).result
    assert report.diffList == [DiffReportEntry(sourcePath="", type="MODIFY")]
    assert report.toSnapshot == "s4"


def test_xattrs() -> None:
    js = {
        "XAttrs": [
            {"name": "user.text", "value": '"abc"'},
            {"name": "user.empty"},
        ]
    }
    result = decode_response(
        GetXAttrs(path="/f"), _http_response(200, js), NAMENODE
    ).result
    assert result == {"user.text": "abc", "user.empty": None}

    js = {"XAttrs": [{"name": "user.a", "value": "0x616263"}]}
    request = GetXAttrs(path="/f", encoding=XAttrValueEncoding.HEX)
    result = decode_response(request, _http_response(200, js), NAMENODE).result
    assert result == {"user.a": b"abc"}

    js = {"XAttrs": [{"name": "user.a", "value": "0sYWJj"}]}
    request = GetXAttrs(path="/f", encoding="base64")
    result = decode_response(request, _http_response(200, js), NAMENODE).result
    assert result == {"user.a": b"abc"}

    js = {"XAttrs": [{"name": "user.a", "value": "0sYWJj"}]}
    with pytest.raises(HdfsDecodingError):
        decode_response(GetXAttrs(path="/f"), _http_response(200, js), NAMENODE)

    not_text: Dict[str, Any] = {"XAttrs": [{"name": "user.a", "value": 5}]}
    with pytest.raises(HdfsDecodingError):
        decode_response(GetXAttrs(path="/f"), _http_response(200, not_text), NAMENODE)


def test_list_xattrs() -> None:
    js = {"XAttrNames": '["user.a","user.b"]'}
    result = decode_response(
        ListXAttrs(path="/f"), _http_response(200, js), NAMENODE
    ).result
    assert result == ["user.a", "user.b"]


def test_upload_without_body() -> None:
    http_response = _http_response(201, headers={"Location": "hdfs://nn:8020/f"})
    response = decode_response(Create(path="/f"), http_response, NAMENODE)
    assert response.result is None
    assert response.location == "hdfs://nn:8020/f"
    assert response.status_code == 201


def test_chunked_checksum() -> None:
    """Without a Content-Length the body is still read"""
    checksum = {"algorithm": "MD5", "bytes": "ab", "length": 28}
    http_response = _http_response(
        200, {"FileChecksum": checksum}, headers={"Transfer-Encoding": "chunked"}
    )
    del http_response.headers["Content-Length"]
    response = decode_response(GetFileChecksum(path="/f"), http_response, NAMENODE)
    assert response.content_length is None
    assert response.result == FileChecksum(**checksum)


def test_zero_content_length_upload() -> None:
    http_response = _http_response(201, headers={"Content-Length": "0"})
    response = decode_response(Create(path="/f"), http_response, NAMENODE)
    assert response.result is None
    assert response.content_length == 0


def test_malformed_content_length() -> None:
    http_response = _http_response(200, {"boolean": True})
    http_response.headers["Content-Length"] = "lots"
    response = decode_response(Mkdirs(path="/d"), http_response, NAMENODE)
    assert response.content_length is None
    assert response.result is True
