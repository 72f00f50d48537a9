import threading
from typing import Any
from typing import Dict
from typing import Type

import pytest

from pyhttpfs.exceptions import HdfsValidationError
from pyhttpfs.exceptions import MissingRequiredField
from pyhttpfs.operations import CallContext
from pyhttpfs.operations import Concat
from pyhttpfs.operations import Create
from pyhttpfs.operations import GetHomeDirectory
from pyhttpfs.operations import GetXAttrs
from pyhttpfs.operations import Mkdirs
from pyhttpfs.operations import Operation
from pyhttpfs.operations import REQUEST_CLASSES
from pyhttpfs.operations import Rename
from pyhttpfs.operations import RenameSnapshot
from pyhttpfs.operations import Request
from pyhttpfs.operations import SetPermission
from pyhttpfs.operations import SetXAttr
from pyhttpfs.operations import Truncate
from pyhttpfs.operations import XAttrSetFlag
from pyhttpfs.operations import XAttrValueEncoding


def test_unset_parameters_are_omitted() -> None:
    assert Create(path="/a").raw_query() == "op=CREATE"
    assert Create(path="/a", overwrite=False, blocksize=0).raw_query() == (
        "op=CREATE&overwrite=false&blocksize=0"
    )
    assert Truncate(path="/a", newlength=0).query_params() == [
        ("op", "TRUNCATE"),
        ("newlength", "0"),
    ]


def test_permission_is_octal() -> None:
    assert Mkdirs(path="/a", permission=0o644).raw_query() == (
        "op=MKDIRS&permission=0644"
    )
    assert Mkdirs(path="/a", permission=0o1777).raw_query() == (
        "op=MKDIRS&permission=01777"
    )
    assert SetPermission(path="/a", permission=0).raw_query() == (
        "op=SETPERMISSION&permission=0"
    )


def test_context_parameters_come_first() -> None:
    context = CallContext(
        delegation="tok",
        user_name="someone",
        doas="alice",
        xsrf_header="true",
        close=True,
        cancel=threading.Event(),
    )
    request = Rename(path="/a", destination="/b", context=context)
    assert request.query_params() == [
        ("op", "RENAME"),
        ("delegation", "tok"),
        ("user.name", "someone"),
        ("doas", "alice"),
        ("destination", "/b"),
    ]


@pytest.mark.parametrize(
    "cls,kwargs,field",
    [
        (Mkdirs, {}, "path"),
        (Rename, {"path": "/a"}, "destination"),
        (Truncate, {"path": "/a"}, "newlength"),
        (SetXAttr, {"path": "/a", "xattr_name": "user.a"}, "flag"),
        (RenameSnapshot, {"path": "/a", "snapshotname": "s2"}, "oldsnapshotname"),
    ],
)
def test_missing_required_field(
    cls: Type[Request], kwargs: Dict[str, Any], field: str
) -> None:
    with pytest.raises(MissingRequiredField) as exc_info:
        cls(**kwargs).validate()
    assert exc_info.value.field == field
    assert exc_info.value.operation == cls.op.value
    assert str(exc_info.value) == f"{cls.op.value} requires {field!r}"


def test_relative_path() -> None:
    with pytest.raises(HdfsValidationError):
        Mkdirs(path="tmp/a").validate()
    with pytest.raises(ValueError):
        Mkdirs(path="").validate()


def test_operations_without_path() -> None:
    request = GetHomeDirectory()
    request.validate()
    assert request.raw_path() == ""
    assert request.raw_query() == "op=GETHOMEDIRECTORY"


def test_trailing_slash_is_kept() -> None:
    assert Mkdirs(path="/a/b/").raw_path() == "/a/b/"


def test_concat() -> None:
    request = Concat(path="/f", sources=["/a", "/b"])
    request.validate()
    assert request.raw_query() == "op=CONCAT&sources=%2Fa%2C%2Fb"
    with pytest.raises(HdfsValidationError, match="should be a list"):
        Concat(path="/f", sources="/a").validate()  # type: ignore[arg-type]
    with pytest.raises(HdfsValidationError, match="commas"):
        Concat(path="/f", sources=["/a,b"]).validate()


def test_xattr_parameters() -> None:
    request = SetXAttr(
        path="/f", xattr_name="user.a", xattr_value='"x"', flag=XAttrSetFlag.REPLACE
    )
    assert request.query_params() == [
        ("op", "SETXATTR"),
        ("xattr.name", "user.a"),
        ("xattr.value", '"x"'),
        ("flag", "REPLACE"),
    ]
    # one xattr.name per requested attribute
    request2 = GetXAttrs(
        path="/f", xattr_name=["user.a", "user.b"], encoding=XAttrValueEncoding.HEX
    )
    assert request2.raw_query() == (
        "op=GETXATTRS&xattr.name=user.a&xattr.name=user.b&encoding=hex"
    )


def test_operation_metadata() -> None:
    assert Operation.CREATE.method == "PUT"
    assert Operation.APPEND.method == "POST"
    assert Operation.DELETE.method == "DELETE"
    assert {op for op in Operation if op.redirect} == {
        Operation.CREATE,
        Operation.APPEND,
        Operation.OPEN,
        Operation.GETFILECHECKSUM,
    }
    assert {op for op in Operation if op.upload} == {Operation.CREATE, Operation.APPEND}
    assert Operation("LISTSTATUS_BATCH") is Operation.LISTSTATUS_BATCH  # type: ignore[call-arg]


def test_every_operation_has_a_request_class() -> None:
    assert set(REQUEST_CLASSES) == set(Operation)
    for op, cls in REQUEST_CLASSES.items():
        assert issubclass(cls, Request)
        assert cls.op is op
