from tutormatch.core.workflow.order_status import (
    OrderStatus, Role, transition, allowed_targets, contact_visible, is_active,
    INITIAL_STATUS, ADMIN_DEFAULT_STATUSES,
)
from tutormatch.core.workflow.job_status import (
    JobStatus, SexRequirement, job_transition, is_listed,
)
