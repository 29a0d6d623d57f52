import enum


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    STAFF = "STAFF"
    CLIENT = "CLIENT"


class ProjectStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class FolderType(str, enum.Enum):
    PROJECT = "PROJECT"
    ASSETS = "ASSETS"
    DELIVERABLES = "DELIVERABLES"


class AssetType(str, enum.Enum):
    SCRIPT = "SCRIPT"
    IMAGE = "IMAGE"
    AUDIO = "AUDIO"
    OTHER = "OTHER"


class UploadKind(str, enum.Enum):
    ASSET = "ASSET"
    DELIVERY = "DELIVERY"


class UploadSessionStatus(str, enum.Enum):
    INITIATED = "INITIATED"
    COMPLETED = "COMPLETED"
    ABORTED = "ABORTED"
    EXPIRED = "EXPIRED"
