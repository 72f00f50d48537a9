"""Exceptions raised by the client, and translation of WebHDFS ``RemoteException`` payloads

A remote exception is translated into a class named ``Hdfs<ExceptionName>``. The classes that
correspond to a portable error kind also derive from the matching built-in ``OSError`` subclass, so
callers can write ``except FileNotFoundError`` instead of matching server messages.
"""

import errno
from typing import ClassVar
from typing import Dict
from typing import List
from typing import Optional
from typing import Tuple
from typing import Type


class HdfsException(Exception):
    """Base class for all errors while communicating with WebHDFS server"""


class HdfsValidationError(HdfsException, ValueError):
    """A request was rejected locally, before any network call"""


class MissingRequiredField(HdfsValidationError):
    """A field that the operation requires was not set

    :param field: name of the missing field
    """

    def __init__(self, operation: str, field: str) -> None:
        super().__init__(f"{operation} requires {field!r}")
        self.operation = operation
        self.field = field


class HdfsConfigurationError(HdfsException, ValueError):
    """The client is configured in a way that can't work, e.g. no server addresses"""


class HdfsDecodingError(HdfsException):
    """The server answered with something that isn't the expected JSON document"""


class HdfsHttpStatusException(HdfsException):
    """The server answered with a failure status and nothing to explain it"""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class HdfsPreSendHookError(HdfsException):
    """The caller supplied pre-send hook failed. This is never retried on another server."""


class HdfsCancelledError(HdfsException):
    """The call was cancelled or ran past its deadline"""


class HdfsNoServerException(HdfsException):
    """The client was not able to use any of the given servers

    :param errors: ``(address, exception)`` for every attempt, in the order they were made
    """

    def __init__(
        self, message: str, errors: Optional[List[Tuple[str, BaseException]]] = None
    ) -> None:
        self.errors = list(errors or [])
        if self.errors:
            message += ": " + "; ".join(
                f"{host}: {_describe(e)}" for host, e in self.errors
            )
        super().__init__(message)


def _describe(e: BaseException) -> str:
    return f"{type(e).__name__}({e})"


class HdfsHttpException(HdfsException):
    """The client was able to talk to the server but got a HTTP error code.

    :param message: Exception message
    :param exception: Name of the exception
    :param javaClassName: Java class name of the exception
    :param status_code: HTTP status code
    :type status_code: int
    :param kwargs: any extra attributes in case Hadoop adds more stuff
    """

    java_class_name: ClassVar[Optional[str]] = None
    #: errno of the built-in error kind, for the classes that derive from one
    os_errno: ClassVar[Optional[int]] = None
    errno: Optional[int]

    def __init__(
        self,
        message: str,
        exception: str,
        status_code: int,
        javaClassName: Optional[str] = None,
        **kwargs: object,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.exception = exception
        self.javaClassName = javaClassName
        self.status_code = status_code
        self.__dict__.update(kwargs)
        if isinstance(self, OSError) and self.os_errno is not None:
            self.errno = self.os_errno


# NOTE: the following exceptions are referenced using globals() to build _EXCEPTION_CLASSES


class HdfsIllegalArgumentException(HdfsHttpException):
    java_class_name = "java.lang.IllegalArgumentException"


class HdfsHadoopIllegalArgumentException(HdfsIllegalArgumentException):
    java_class_name = "org.apache.hadoop.HadoopIllegalArgumentException"


class HdfsInvalidPathException(HdfsHadoopIllegalArgumentException):
    java_class_name = "org.apache.hadoop.fs.InvalidPathException"


class HdfsUnsupportedOperationException(HdfsHttpException):
    java_class_name = "java.lang.UnsupportedOperationException"


class HdfsSecurityException(HdfsHttpException):
    java_class_name = "java.lang.SecurityException"


class HdfsIOException(HdfsHttpException):
    java_class_name = "java.io.IOException"


class HdfsQuotaExceededException(HdfsIOException):
    java_class_name = "org.apache.hadoop.hdfs.protocol.QuotaExceededException"


class HdfsNSQuotaExceededException(HdfsQuotaExceededException):
    java_class_name = "org.apache.hadoop.hdfs.protocol.NSQuotaExceededException"


class HdfsDSQuotaExceededException(HdfsQuotaExceededException):
    java_class_name = "org.apache.hadoop.hdfs.protocol.DSQuotaExceededException"


class HdfsAccessControlException(HdfsIOException, PermissionError):
    java_class_name = "org.apache.hadoop.security.AccessControlException"
    os_errno = errno.EACCES


class HdfsFileAlreadyExistsException(HdfsIOException, FileExistsError):
    java_class_name = "org.apache.hadoop.fs.FileAlreadyExistsException"
    os_errno = errno.EEXIST


class HdfsAlreadyBeingCreatedException(HdfsIOException, FileExistsError):
    java_class_name = "org.apache.hadoop.hdfs.protocol.AlreadyBeingCreatedException"
    os_errno = errno.EEXIST


class HdfsPathIsNotEmptyDirectoryException(HdfsIOException, OSError):
    java_class_name = "org.apache.hadoop.fs.PathIsNotEmptyDirectoryException"
    os_errno = errno.ENOTEMPTY


# thrown in safe mode
class HdfsRemoteException(HdfsIOException):
    java_class_name = "org.apache.hadoop.ipc.RemoteException"


# thrown in startup mode
class HdfsRetriableException(HdfsIOException):
    java_class_name = "org.apache.hadoop.ipc.RetriableException"


class HdfsStandbyException(HdfsIOException):
    java_class_name = "org.apache.hadoop.ipc.StandbyException"


class HdfsSnapshotException(HdfsIOException):
    java_class_name = "org.apache.hadoop.hdfs.protocol.SnapshotException"


class HdfsFileNotFoundException(HdfsIOException, FileNotFoundError):
    java_class_name = "java.io.FileNotFoundException"
    os_errno = errno.ENOENT


class HdfsRuntimeException(HdfsHttpException):
    java_class_name = "java.lang.RuntimeException"


_EXCEPTION_CLASSES: Dict[str, Type[HdfsHttpException]] = {
    name: member
    for name, member in globals().items()
    if isinstance(member, type) and issubclass(member, HdfsHttpException)
}

_JAVA_EXCEPTION_CLASSES: Dict[str, Type[HdfsHttpException]] = {
    cls.java_class_name: cls
    for cls in _EXCEPTION_CLASSES.values()
    if cls.java_class_name is not None
}


def translate_remote_exception(
    remote_exception: Dict[str, str], status_code: int
) -> HdfsHttpException:
    """Turn the body of a ``RemoteException`` into the matching local exception.

    The Java class name is authoritative when the server sends it, otherwise fall back to the short
    exception name. Unknown exceptions become a plain :py:class:`HdfsHttpException` that keeps the
    server's message as-is.
    """
    remote_exception = dict(remote_exception)
    exception_name = remote_exception.pop("exception", "")
    message = remote_exception.pop("message", "")
    java_class_name = remote_exception.pop("javaClassName", None)
    cls: Optional[Type[HdfsHttpException]] = None
    if java_class_name:
        cls = _JAVA_EXCEPTION_CLASSES.get(java_class_name)
    if cls is None:
        cls = _EXCEPTION_CLASSES.get("Hdfs" + exception_name)
    if cls is None:
        e = HdfsHttpException(
            message,
            exception_name,
            status_code,
            javaClassName=java_class_name,
            **remote_exception,
        )
        # prefix the message with the exception name since we're not using a fancy class
        e.args = (exception_name + " - " + message,)
        return e
    return cls(
        message,
        exception_name,
        status_code,
        javaClassName=java_class_name,
        **remote_exception,
    )
