"""WebHDFS and HttpFS client with NameNode failover and translated remote exceptions

For details on the endpoints, see the Hadoop documentation:

- https://hadoop.apache.org/docs/current/hadoop-project-dist/hadoop-hdfs/WebHDFS.html
- https://hadoop.apache.org/docs/current/api/org/apache/hadoop/fs/FileSystem.html
"""

from pyhttpfs.client import HTTPFS
from pyhttpfs.client import HdfsClient
from pyhttpfs.client import WEBHDFS
from pyhttpfs.decoders import Response
from pyhttpfs.exceptions import HdfsAccessControlException
from pyhttpfs.exceptions import HdfsAlreadyBeingCreatedException
from pyhttpfs.exceptions import HdfsCancelledError
from pyhttpfs.exceptions import HdfsConfigurationError
from pyhttpfs.exceptions import HdfsDecodingError
from pyhttpfs.exceptions import HdfsException
from pyhttpfs.exceptions import HdfsFileAlreadyExistsException
from pyhttpfs.exceptions import HdfsFileNotFoundException
from pyhttpfs.exceptions import HdfsHttpException
from pyhttpfs.exceptions import HdfsHttpStatusException
from pyhttpfs.exceptions import HdfsIOException
from pyhttpfs.exceptions import HdfsIllegalArgumentException
from pyhttpfs.exceptions import HdfsNoServerException
from pyhttpfs.exceptions import HdfsPathIsNotEmptyDirectoryException
from pyhttpfs.exceptions import HdfsPreSendHookError
from pyhttpfs.exceptions import HdfsRetriableException
from pyhttpfs.exceptions import HdfsStandbyException
from pyhttpfs.exceptions import HdfsValidationError
from pyhttpfs.exceptions import MissingRequiredField
from pyhttpfs.operations import CallContext
from pyhttpfs.operations import Operation
from pyhttpfs.operations import Request
from pyhttpfs.operations import XAttrSetFlag
from pyhttpfs.operations import XAttrValueEncoding
from pyhttpfs.schemas import ContentSummary
from pyhttpfs.schemas import FileChecksum
from pyhttpfs.schemas import FileStatus
from pyhttpfs.schemas import Permission

__version__ = "0.1.0"

__all__ = [
    "HTTPFS",
    "WEBHDFS",
    "CallContext",
    "ContentSummary",
    "FileChecksum",
    "FileStatus",
    "HdfsAccessControlException",
    "HdfsAlreadyBeingCreatedException",
    "HdfsCancelledError",
    "HdfsClient",
    "HdfsConfigurationError",
    "HdfsDecodingError",
    "HdfsException",
    "HdfsFileAlreadyExistsException",
    "HdfsFileNotFoundException",
    "HdfsHttpException",
    "HdfsHttpStatusException",
    "HdfsIOException",
    "HdfsIllegalArgumentException",
    "HdfsNoServerException",
    "HdfsPathIsNotEmptyDirectoryException",
    "HdfsPreSendHookError",
    "HdfsRetriableException",
    "HdfsStandbyException",
    "HdfsValidationError",
    "MissingRequiredField",
    "Operation",
    "Permission",
    "Request",
    "Response",
    "XAttrSetFlag",
    "XAttrValueEncoding",
]
