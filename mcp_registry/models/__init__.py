from mcp_registry.models.base import Base  # noqa: F401

from mcp_registry.models.account import Account  # noqa: F401
from mcp_registry.models.api_key import ApiKey  # noqa: F401
from mcp_registry.models.server import McpServer, McpServerTag  # noqa: F401
from mcp_registry.models.submission import ServerSubmission  # noqa: F401
from mcp_registry.models.verification_request import VerificationRequest  # noqa: F401
from mcp_registry.models.bootstrap_state import BootstrapState  # noqa: F401
from mcp_registry.models.audit_log import AuditLog  # noqa: F401
