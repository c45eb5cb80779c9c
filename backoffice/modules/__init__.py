"""Domain modules package."""

from backoffice.modules.audit import models as audit_models  # noqa: F401
from backoffice.modules.catalog import models as catalog_models  # noqa: F401
from backoffice.modules.content import models as content_models  # noqa: F401
from backoffice.modules.identity import models as identity_models  # noqa: F401
from backoffice.modules.payments import models as payments_models  # noqa: F401
from backoffice.modules.reports import models as reports_models  # noqa: F401
from backoffice.modules.users import models as users_models  # noqa: F401
