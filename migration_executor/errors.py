"""
Migration Executor Errors

Exception hierarchy for copy-offload reconciliation and plan validation,
plus classification of remote faults into a closed set of kinds.
"""

import re
from enum import Enum
from typing import Dict, List, Optional, Any


class MigrationExecutorError(Exception):
    """Base exception for migration executor operations"""

    def __init__(self, message: str, host: Optional[str] = None, datastore: Optional[str] = None):
        self.message = message
        self.host = host
        self.datastore = datastore
        super().__init__(self.message)


class RemoteCallError(MigrationExecutorError):
    """Transport, query, upload or install failure against vCenter/ESXi"""


class EsxcliFault(RemoteCallError):
    """Raised when an esxcli command exits non-zero"""

    def __init__(self, message: str, err_msgs: Optional[List[str]] = None,
                 exit_code: Optional[int] = None, host: Optional[str] = None):
        super().__init__(message, host=host)
        self.err_msgs = list(err_msgs or [])
        self.exit_code = exit_code


class VibError(RemoteCallError):
    """Raised when a VIB query, upload or install step fails"""


class HierarchyLookupError(RemoteCallError):
    """Raised when fetching a parent entity fails mid-walk"""


class DatacenterNotFoundError(MigrationExecutorError):
    """Raised when walking a host's parents never reaches a Datacenter"""


class OperationCancelled(MigrationExecutorError):
    """Raised when the caller cancelled the enclosing operation"""


class OperationTimedOut(MigrationExecutorError):
    """Raised when the caller's deadline passed before a remote step"""


class PlanValidationError(MigrationExecutorError):
    """Raised when a VM manifest cannot be read for plan validation"""


class FaultKind(Enum):
    NOT_FOUND = "not_found"
    OTHER = "other"


# esxcli error markers mapped to fault kinds
ESXCLI_FAULT_MARKERS: Dict[str, FaultKind] = {
    '[NoMatchError]': FaultKind.NOT_FOUND,
}

# Operator-facing descriptions, keyed by fault kind
FAULT_MESSAGES: Dict[FaultKind, Dict[str, Any]] = {
    FaultKind.NOT_FOUND: {
        'title': 'Not Installed',
        'message': 'The requested VIB is not installed on the host.',
        'severity': 'info',
        'is_recoverable': True,
    },
    FaultKind.OTHER: {
        'title': 'esxcli Failure',
        'message': 'The esxcli command failed on the host.',
        'severity': 'error',
        'is_recoverable': False,
    },
}


def classify_fault(error: Exception) -> FaultKind:
    """
    Classify a remote fault.

    Only EsxcliFault carries a message list; every other exception is
    FaultKind.OTHER.
    """
    if not isinstance(error, EsxcliFault):
        return FaultKind.OTHER

    for msg in error.err_msgs:
        for marker, kind in ESXCLI_FAULT_MARKERS.items():
            if marker in msg:
                return kind
    return FaultKind.OTHER


def describe_fault(error: Exception) -> Dict[str, Any]:
    """
    Build an operator-facing description of a remote fault.

    Returns:
        Dict with title, message, severity, is_recoverable, fault_kind and
        the first original esxcli message line (if any)
    """
    kind = classify_fault(error)
    info = dict(FAULT_MESSAGES[kind])
    info['fault_kind'] = kind.value

    original = None
    for msg in getattr(error, 'err_msgs', []):
        stripped = re.sub(r"^\[\w+\]\s*", "", msg.strip())
        if stripped:
            original = stripped
            break
    info['original_message'] = original or str(error)
    return info
