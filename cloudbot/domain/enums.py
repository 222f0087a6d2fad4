"""Enums for the deployment domain."""

from enum import Enum


class ScenarioStatus(str, Enum):
    """Persisted lifecycle state of a scenario.

    - PENDING: Created, or a deploy attempt failed and may be retried
    - DEPLOYED: Every requested node is placed
    - DESTROYED: Terminal; resources were torn down
    """

    PENDING = "pending"
    DEPLOYED = "deployed"
    DESTROYED = "destroyed"


class DeployOutcome(str, Enum):
    """Overall result of one deploy call."""

    DEPLOYED = "deployed"
    PARTIAL = "partial"
    FAILED = "failed"


class EngineErrorKind(str, Enum):
    """Classified provisioning engine failure.

    - QUOTA_EXCEEDED: Provider-side quota or capacity limit; try elsewhere
    - AUTH_ERROR: Credentials rejected by the provider
    - OTHER: Anything else; aborts the deploy
    """

    QUOTA_EXCEEDED = "quota_exceeded"
    AUTH_ERROR = "auth_error"
    OTHER = "other"


class FailureKind(str, Enum):
    """Why a deploy did not reach full placement."""

    AUTH_MISSING = "auth_missing"
    QUOTA_EXHAUSTED = "quota_exhausted"
    ENGINE_FAILURE = "engine_failure"
    NO_CANDIDATES = "no_candidates"


class AttemptOutcome(str, Enum):
    """Result of provisioning one region attempt."""

    PLACED = "placed"
    QUOTA_EXCEEDED = "quota_exceeded"
    FAILED = "failed"
