"""Core enums used across modules."""

from enum import StrEnum


class AdminRoleEnum(StrEnum):
    """Back-office actor roles."""

    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class AccessLevelEnum(StrEnum):
    """Privilege level an operation requires."""

    AUTHENTICATED = "authenticated"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class UserRoleEnum(StrEnum):
    """Platform user roles."""

    USER = "user"
    CREATOR = "creator"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class SuspensionDurationEnum(StrEnum):
    """Suspension duration kind."""

    TEMPORARY = "temporary"
    PERMANENT = "permanent"


class CreatorApplicationStatusEnum(StrEnum):
    """Creator application review status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ContentStatusEnum(StrEnum):
    """Post and comment moderation status."""

    VISIBLE = "visible"
    HIDDEN = "hidden"
    DELETED = "deleted"


class PostTypeEnum(StrEnum):
    """Post media type."""

    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"


class StreamStatusEnum(StrEnum):
    """Live stream status."""

    LIVE = "live"
    ENDED = "ended"


class ReportStatusEnum(StrEnum):
    """User report lifecycle status."""

    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class ReportReasonEnum(StrEnum):
    """Report reason category."""

    SPAM = "spam"
    HARASSMENT = "harassment"
    HATE_SPEECH = "hate_speech"
    NUDITY = "nudity"
    VIOLENCE = "violence"
    MISINFORMATION = "misinformation"
    OTHER = "other"


class ModerationActionEnum(StrEnum):
    """Action taken when a report is resolved."""

    NO_ACTION = "no_action"
    WARNING_SENT = "warning_sent"
    CONTENT_REMOVED = "content_removed"
    USER_SUSPENDED = "user_suspended"
    USER_BANNED = "user_banned"


class PaymentStatusEnum(StrEnum):
    """Coin purchase status."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class DiscountTypeEnum(StrEnum):
    """How a discount value is applied."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DiscountCodeTypeEnum(StrEnum):
    """Origin of a discount code."""

    PROMOTIONAL = "promotional"
    CREATOR = "creator"


class SubjectKindEnum(StrEnum):
    """Entities an admin transition can target."""

    USER = "user"
    CREATOR_APPLICATION = "creator_application"
    POST = "post"
    COMMENT = "comment"
    STREAM = "stream"
    REPORT = "report"
    PAYMENT = "payment"
    ADMIN = "admin"
    DISCOUNT_CODE = "discount_code"
    GIFT = "gift"
    ANALYTICS = "analytics"


class TransitionKindEnum(StrEnum):
    """Named status transitions."""

    SUSPEND = "suspend"
    UNSUSPEND = "unsuspend"
    APPROVE = "approve"
    REJECT = "reject"
    HIDE = "hide"
    UNHIDE = "unhide"
    DELETE = "delete"
    END = "end"
    REVIEW = "review"
    RESOLVE = "resolve"
    DISMISS = "dismiss"
    REFUND = "refund"
    DEACTIVATE = "deactivate"
    ACTIVATE = "activate"


class AuditActionEnum(StrEnum):
    """Audit record action kinds."""

    USER_SUSPENDED = "USER_SUSPENDED"
    USER_UNSUSPENDED = "USER_UNSUSPENDED"
    USER_NOTES_UPDATED = "USER_NOTES_UPDATED"
    CREATOR_APPROVED = "CREATOR_APPROVED"
    CREATOR_REJECTED = "CREATOR_REJECTED"
    POST_HIDDEN = "POST_HIDDEN"
    POST_UNHIDDEN = "POST_UNHIDDEN"
    POST_DELETED = "POST_DELETED"
    COMMENT_HIDDEN = "COMMENT_HIDDEN"
    COMMENT_UNHIDDEN = "COMMENT_UNHIDDEN"
    COMMENT_DELETED = "COMMENT_DELETED"
    STREAM_ENDED = "STREAM_ENDED"
    REPORT_REVIEWED = "REPORT_REVIEWED"
    REPORT_RESOLVED = "REPORT_RESOLVED"
    REPORT_DISMISSED = "REPORT_DISMISSED"
    REFUND_PAYMENT = "REFUND_PAYMENT"
    CREATE_DISCOUNT_CODE = "CREATE_DISCOUNT_CODE"
    UPDATE_DISCOUNT_CODE = "UPDATE_DISCOUNT_CODE"
    DELETE_DISCOUNT_CODE = "DELETE_DISCOUNT_CODE"
    CREATE_GIFT = "CREATE_GIFT"
    UPDATE_GIFT = "UPDATE_GIFT"
    DELETE_GIFT = "DELETE_GIFT"
    ADMIN_CREATED = "ADMIN_CREATED"
    ADMIN_DEACTIVATED = "ADMIN_DEACTIVATED"
    ADMIN_ACTIVATED = "ADMIN_ACTIVATED"
    ADMIN_DELETED = "ADMIN_DELETED"
    ADMIN_LOGIN = "ADMIN_LOGIN"
    ANALYTICS_VIEWED = "ANALYTICS_VIEWED"


class AnalyticsMetricEnum(StrEnum):
    """Dashboard metrics served by the analytics reducer."""

    OVERVIEW = "overview"
    REVENUE = "revenue"
    TRANSACTIONS = "transactions"
    USERS = "users"
    CONTENT = "content"
    GIFTS = "gifts"
    REPORTS = "reports"
    DISCOUNTS = "discounts"
    ADMIN_ACTIVITY = "admin_activity"


class GroupByEnum(StrEnum):
    """Calendar bucket size for time series."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class SortOrderEnum(StrEnum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class EntityKindEnum(StrEnum):
    """Entity collections exposed through the list endpoint."""

    USERS = "users"
    CREATOR_APPLICATIONS = "creator_applications"
    POSTS = "posts"
    COMMENTS = "comments"
    STREAMS = "streams"
    REPORTS = "reports"
    PAYMENTS = "payments"
    DISCOUNT_CODES = "discount_codes"
    GIFTS = "gifts"
    GIFT_TRANSACTIONS = "gift_transactions"
    ADMINS = "admins"
