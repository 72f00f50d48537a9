"""Records decoded from WebHDFS JSON responses

See https://hadoop.apache.org/docs/current/hadoop-project-dist/hadoop-hdfs/WebHDFS.html#JSON_Schemas
"""  # noqa: E501

import posixpath
import stat
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

FILE = "FILE"
DIRECTORY = "DIRECTORY"
SYMLINK = "SYMLINK"


class Permission(int):
    """A permission mode. WebHDFS sends it as an octal string, e.g. ``"755"``.

    >>> Permission.from_octal("755") == 0o755
    True
    """

    @classmethod
    def from_octal(cls, value: str) -> "Permission":
        return cls(int(value, 8))

    def __str__(self) -> str:
        return f"{self:o}"

    def __repr__(self) -> str:
        return f"Permission(0o{self:o})"


class _BoilerplateClass(Dict[str, Any]):
    """Turns a dictionary into a nice looking object with a pretty repr.

    Unlike namedtuple, this class is very lenient. It will not error out when it gets extra
    attributes. This lets us tolerate new HDFS features without any code change at the expense of
    higher chance of error / more black magic.
    """

    def __init__(self, **kwargs: object) -> None:
        super().__init__(**kwargs)
        self.__dict__ = self

    def __repr__(self) -> str:
        kvs = [f"{k}={v!r}" for k, v in self.items()]
        return "{}({})".format(self.__class__.__name__, ", ".join(kvs))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, self.__class__) and dict.__eq__(self, other)

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)


class TypeQuota(_BoilerplateClass):
    """
    :param consumed: The storage type space consumed.
    :type consumed: int
    :param quota: The storage type quota.
    :type quota: int
    """

    consumed: int
    quota: int


def _type_quota(data: Dict[str, Any]) -> Dict[str, Any]:
    if "typeQuota" in data:
        data["typeQuota"] = {k: TypeQuota(**v) for k, v in data["typeQuota"].items()}
    return data


class ContentSummary(_BoilerplateClass):
    """
    :param directoryCount: The number of directories.
    :type directoryCount: int
    :param fileCount: The number of files.
    :type fileCount: int
    :param length: The number of bytes used by the content.
    :type length: int
    :param quota: The namespace quota of this directory.
    :type quota: int
    :param spaceConsumed: The disk space consumed by the content.
    :type spaceConsumed: int
    :param spaceQuota: The disk space quota.
    :type spaceQuota: int
    :param typeQuota: Quota usage for ARCHIVE, DISK, SSD
    :type typeQuota: Dict[str, TypeQuota]
    """

    directoryCount: int
    fileCount: int
    length: int
    quota: int
    spaceConsumed: int
    spaceQuota: int
    typeQuota: Dict[str, TypeQuota]

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ContentSummary":
        return cls(**_type_quota(data))


class QuotaUsage(_BoilerplateClass):
    """
    :param fileAndDirectoryCount: The number of files and directories.
    :type fileAndDirectoryCount: int
    :param quota: The namespace quota of this directory.
    :type quota: int
    :param spaceConsumed: The disk space consumed by the content.
    :type spaceConsumed: int
    :param spaceQuota: The disk space quota.
    :type spaceQuota: int
    :param typeQuota: Quota usage for ARCHIVE, DISK, SSD
    :type typeQuota: Dict[str, TypeQuota]
    """

    fileAndDirectoryCount: int
    quota: int
    spaceConsumed: int
    spaceQuota: int
    typeQuota: Dict[str, TypeQuota]

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "QuotaUsage":
        return cls(**_type_quota(data))


class FileChecksum(_BoilerplateClass):
    """
    :param algorithm: The name of the checksum algorithm.
    :type algorithm: str
    :param bytes: The byte sequence of the checksum in hexadecimal.
    :type bytes: str
    :param length: The length of the bytes (not the length of the string).
    :type length: int
    """

    algorithm: str
    bytes: str
    length: int


class FileStatus(_BoilerplateClass):
    """
    :param accessTime: The access time.
    :type accessTime: int
    :param blockSize: The block size of a file.
    :type blockSize: int
    :param group: The group owner.
    :type group: str
    :param length: The number of bytes in a file.
    :type length: int
    :param modificationTime: The modification time.
    :type modificationTime: int
    :param owner: The user who is the owner.
    :type owner: str
    :param pathSuffix: The path suffix.
    :type pathSuffix: str
    :param permission: The permission, decoded from its octal string.
    :type permission: Permission
    :param replication: The number of replication of a file.
    :type replication: int
    :param symlink: The link target of a symlink.
    :type symlink: Optional[str]
    :param type: The type of the path object.
    :type type: str
    :param childrenNum: How many children this directory has, or 0 for files.
    :type childrenNum: int
    :param fileId: The inode id.
    :type fileId: int
    """

    # Not part of the dict, so it doesn't show up in repr or equality
    __slots__ = ("_parent",)

    accessTime: int
    blockSize: int
    group: str
    length: int
    modificationTime: int
    owner: str
    pathSuffix: str
    permission: Permission
    replication: int
    symlink: Optional[str]
    type: str
    childrenNum: int
    fileId: int

    def __init__(self, **kwargs: object) -> None:
        super().__init__(**kwargs)
        self._parent = ""

    @classmethod
    def from_json(cls, data: Dict[str, Any], path: str = "") -> "FileStatus":
        """Build a status from its JSON properties

        :param path: the path that was requested, used to name the object when ``pathSuffix`` is
            empty.
        """
        if isinstance(data.get("permission"), str):
            data["permission"] = Permission.from_octal(data["permission"])
        status = cls(**data)
        status._parent = path
        return status

    @property
    def name(self) -> str:
        """``pathSuffix`` if set, otherwise the base name of the requested path"""
        if self.get("pathSuffix"):
            return str(self["pathSuffix"])
        stripped = self._parent.rstrip("/")
        if not stripped:
            return self._parent
        return posixpath.basename(stripped)

    @property
    def size(self) -> int:
        return int(self.get("length", 0))

    @property
    def mode(self) -> int:
        """Permission bits plus the file type bits, as in ``os.stat_result.st_mode``"""
        mode = int(self.get("permission", 0))
        if self.get("type") == DIRECTORY:
            return mode | stat.S_IFDIR
        if self.get("type") == SYMLINK:
            return mode | stat.S_IFLNK
        return mode | stat.S_IFREG

    def is_dir(self) -> bool:
        return self.get("type") == DIRECTORY


class DirectoryListing(_BoilerplateClass):
    """A batch of a directory listing

    :param partialListing: The statuses in this batch.
    :type partialListing: List[FileStatus]
    :param remainingEntries: Number of remaining entries.
    :type remainingEntries: int
    """

    partialListing: List[FileStatus]
    remainingEntries: int

    @classmethod
    def from_json(cls, data: Dict[str, Any], path: str = "") -> "DirectoryListing":
        statuses = data.get("partialListing", {}).get("FileStatuses", {})
        data["partialListing"] = [
            FileStatus.from_json(item, path) for item in statuses.get("FileStatus", [])
        ]
        return cls(**data)


class BlockLocation(_BoilerplateClass):
    """
    :param cachedHosts: Datanode hostnames with a cached replica.
    :type cachedHosts: List[str]
    :param corrupt: True if the block is corrupted.
    :type corrupt: bool
    :param hosts: Datanode hostnames store the block.
    :type hosts: List[str]
    :param length: Length of the block.
    :type length: int
    :param names: Datanode IP:xferPort for accessing the block.
    :type names: List[str]
    :param offset: Offset of the block in the file.
    :type offset: int
    :param storageTypes: Storage type of each replica.
    :type storageTypes: List[str]
    :param topologyPaths: Datanode addresses in network topology.
    :type topologyPaths: List[str]
    """

    cachedHosts: List[str]
    corrupt: bool
    hosts: List[str]
    length: int
    names: List[str]
    offset: int
    storageTypes: List[str]
    topologyPaths: List[str]


class BlockStoragePolicy(_BoilerplateClass):
    """
    :param id: Policy ID.
    :type id: int
    :param name: Policy name.
    :type name: str
    :param storageTypes: An array of storage types for block placement.
    :type storageTypes: List[str]
    :param replicationFallbacks: An array of fallback storage types for replication.
    :type replicationFallbacks: List[str]
    :param creationFallbacks: An array of fallback storage types for file creation.
    :type creationFallbacks: List[str]
    :param copyOnCreateFile: If set then the policy cannot be changed after file creation.
    :type copyOnCreateFile: bool
    """

    id: int
    name: str
    storageTypes: List[str]
    replicationFallbacks: List[str]
    creationFallbacks: List[str]
    copyOnCreateFile: bool


class ECPolicy(_BoilerplateClass):
    """
    :param name: Policy name, e.g. ``RS-6-3-1024k``.
    :type name: str
    :param schema: Codec name, data and parity units, extra options.
    :type schema: dict
    :param cellSize: Striping cell size.
    :type cellSize: int
    :param id: Policy ID.
    :type id: int
    :param codecName: Name of the erasure codec.
    :type codecName: str
    :param numDataUnits: Number of data units.
    :type numDataUnits: int
    :param numParityUnits: Number of parity units.
    :type numParityUnits: int
    :param replicationpolicy: Whether this is the replication policy.
    :type replicationpolicy: bool
    :param systemPolicy: Whether this is a built-in policy.
    :type systemPolicy: bool
    """

    name: str
    schema: Dict[str, Any]
    cellSize: int
    id: int
    codecName: str
    numDataUnits: int
    numParityUnits: int
    replicationpolicy: bool
    systemPolicy: bool


class DiffReportEntry(_BoilerplateClass):
    """
    :param sourcePath: Source path name relative to snapshot root.
    :type sourcePath: str
    :param targetPath: Target path relative to snapshot root used for renames.
    :type targetPath: str
    :param type: ``CREATE``, ``MODIFY``, ``DELETE`` or ``RENAME``
    :type type: str
    """

    sourcePath: str
    targetPath: str
    type: str


class SnapshotDiffReport(_BoilerplateClass):
    """
    :param diffList: An array of DiffReportEntry.
    :type diffList: List[DiffReportEntry]
    :param fromSnapshot: Source snapshot.
    :type fromSnapshot: str
    :param snapshotRoot: String representation of snapshot root path.
    :type snapshotRoot: str
    :param toSnapshot: Destination snapshot.
    :type toSnapshot: str
    """

    diffList: List[DiffReportEntry]
    fromSnapshot: str
    snapshotRoot: str
    toSnapshot: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "SnapshotDiffReport":
        data["diffList"] = [DiffReportEntry(**e) for e in data.get("diffList", [])]
        return cls(**data)


class SnapshottableDirectoryStatus(_BoilerplateClass):
    """
    :param dirStatus: Status of the snapshottable directory.
    :type dirStatus: FileStatus
    :param parentFullPath: Full path of the parent of snapshottable directory.
    :type parentFullPath: str
    :param snapshotNumber: Number of snapshots created on the snapshottable directory.
    :type snapshotNumber: int
    :param snapshotQuota: Total number of snapshots allowed on the snapshottable directory.
    :type snapshotQuota: int
    """

    dirStatus: FileStatus
    parentFullPath: str
    snapshotNumber: int
    snapshotQuota: int

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "SnapshottableDirectoryStatus":
        if "dirStatus" in data:
            data["dirStatus"] = FileStatus.from_json(
                data["dirStatus"],
                posixpath.join(
                    data.get("parentFullPath", ""),
                    data["dirStatus"].get("pathSuffix", ""),
                ),
            )
        return cls(**data)


class Token(_BoilerplateClass):
    """
    :param urlString: A delegation token encoded as a URL safe string.
    :type urlString: str
    """

    urlString: str
