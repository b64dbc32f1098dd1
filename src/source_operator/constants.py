"""Constants for the Source Operator."""

# API Group
API_GROUP = "package.r"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"
SOURCE_PLURAL = "sources"

# Resource Kinds
KIND_SOURCE = "Source"
KIND_SECRET = "Secret"
KIND_VOLUME = "PersistentVolume"
KIND_CLAIM = "PersistentVolumeClaim"

# Labels
LABEL_SOURCE_NAME = "source-name"
LABEL_MANAGED_BY = f"{API_GROUP}/managed-by"

# Annotations
ANNOTATION_CLAIM_REVISION = f"{API_GROUP}/claim-revision"

# Field Manager
FIELD_MANAGER = "source-operator"
CONTROLLER_NAME = "source-operator"

# Credential secret keys
SECRET_ACCESS_KEY_ID = "AWS_ACCESS_KEY_ID"
SECRET_SECRET_ACCESS_KEY = "AWS_SECRET_ACCESS_KEY"
SECRET_ENDPOINT_URL = "AWS_ENDPOINT_URL"
SECRET_REGION = "AWS_REGION"
REQUIRED_SECRET_KEYS = (
    SECRET_ACCESS_KEY_ID,
    SECRET_SECRET_ACCESS_KEY,
    SECRET_ENDPOINT_URL,
    SECRET_REGION,
)

# Volume defaults
CSI_DRIVER = "csi-rclone"
DEFAULT_STORAGE_CLASS = "rclone"
DEFAULT_VOLUME_CAPACITY = "10Gi"
ACCESS_MODE_RWX = "ReadWriteMany"

# Driver attribute bag
ATTR_REMOTE = "remote"
ATTR_REMOTE_PATH = "remotePath"
ATTR_S3_PROVIDER = "s3-provider"
ATTR_S3_ENDPOINT = "s3-endpoint"
ATTR_S3_ACCESS_KEY_ID = "s3-access-key-id"
ATTR_S3_SECRET_ACCESS_KEY = "s3-secret-access-key"
ATTR_S3_REGION = "s3-region"
REMOTE_TYPE = "s3"
S3_PROVIDER = "AWS"

# Claim defaults
CLAIM_STORAGE_REQUEST = "1Mi"

# Condition Types
COND_READY = "Ready"
COND_SECRET_NOT_FOUND = "SecretNotFound"

# Event Reasons
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_SECRET_NOT_FOUND = "SecretNotFound"
EVENT_REASON_VALIDATE_FAILED = "ValidateFailed"
EVENT_REASON_VOLUME_CREATED = "VolumeCreated"
EVENT_REASON_VOLUME_UPDATED = "VolumeUpdated"
EVENT_REASON_CLAIM_CREATED = "ClaimCreated"
EVENT_REASON_CLAIM_UPDATED = "ClaimUpdated"
