"""Static lookup tables used throughout the outcome classifier.

Everything here is immutable and loaded once at import time. Learned
descriptions live in the description store, never in these tables.
"""

import re
from re import Pattern
from types import MappingProxyType

from .models.outcome import OutcomeType

# Human-readable labels for review messages
METRIC_LABELS = MappingProxyType({
    OutcomeType.MEETING_BOOKED: "Meeting Booked",
    OutcomeType.LEAD_CREATED: "Lead Created",
    OutcomeType.TICKET_CREATED: "Ticket Created",
    OutcomeType.TICKET_RESOLVED: "Ticket Resolved",
    OutcomeType.EMAIL_SENT: "Email Sent",
    OutcomeType.DEAL_WON: "Deal Won",
    OutcomeType.UNKNOWN: "Unknown Activity",
})

# Short definitions handed to the AI tier
OUTCOME_DEFINITIONS = MappingProxyType({
    OutcomeType.MEETING_BOOKED: "a meeting, viewing or appointment was scheduled; "
    "needs a timestamp plus contact info",
    OutcomeType.LEAD_CREATED: "a new prospect or contact was captured; "
    "needs an email plus a name or phone",
    OutcomeType.TICKET_CREATED: "a support ticket or issue was opened; needs a ticket id and status",
    OutcomeType.TICKET_RESOLVED: "a ticket was closed or resolved; "
    "needs a ticket id and a closed/resolved status",
    OutcomeType.EMAIL_SENT: "an email or notification was delivered; needs a recipient",
    OutcomeType.DEAL_WON: "a sale or contract was closed as won; needs a won status and a deal value",
    OutcomeType.UNKNOWN: "evidence is insufficient or ambiguous",
})

# Expected fields per outcome for the heuristic tier.
# "field=a|b" requires the value to mention one of the words,
# "field!=a|b" requires it to mention none of them.
# A leading "+" marks a field without which the outcome scores 0.
_RESOLVED_STATUSES = "closed|resolved|solved|done|已解決|已完成"

EXPECTED_FIELDS = MappingProxyType({
    OutcomeType.MEETING_BOOKED: ("scheduled_time", "contact_email", "contact_name"),
    OutcomeType.LEAD_CREATED: ("contact_email", "contact_name", "contact_phone"),
    OutcomeType.TICKET_CREATED: ("+ticket_id", f"status!={_RESOLVED_STATUSES}"),
    OutcomeType.TICKET_RESOLVED: ("+ticket_id", f"status={_RESOLVED_STATUSES}"),
    OutcomeType.EMAIL_SENT: ("recipient", "message_id"),
    OutcomeType.DEAL_WON: ("deal_value", "status=won|成交|已簽約"),
})

# Alternative field names (English + Traditional Chinese) per canonical field
FIELD_ALIASES = MappingProxyType({
    "scheduled_time": ("scheduled_at", "start_time", "event_date", "meeting_time", "預約時間", "會議時間"),
    "contact_email": ("email", "user_email", "email_address", "電郵", "電子郵件"),
    "contact_name": ("name", "full_name", "customer_name", "姓名", "名字"),
    "contact_phone": ("phone", "mobile", "telephone", "phone_number", "電話", "手機"),
    "ticket_id": ("issue_id", "case_id", "工單編號"),
    "status": ("state", "狀態"),
    "recipient": ("to", "recipient_email", "收件人"),
    "message_id": ("email_id",),
    "deal_value": ("amount", "deal_amount", "成交金額"),
})

# Summary fields that identify a run rather than describe it
BOOKKEEPING_FIELDS = frozenset({"execution_id", "company_id", "workflow_id"})
WORKFLOW_NAME_FIELD = "workflow_name"
WORKFLOW_DESCRIPTION_FIELD = "workflow_description"

# Words that negate the status word right after them ("not closed")
NEGATION_WORDS = frozenset({"not", "no", "never"})

CJK_PATTERN: Pattern = re.compile(r"[一-鿿]")
LATIN_PATTERN: Pattern = re.compile(r"[A-Za-z]")

# Built-in example descriptions, embedded once as global system entries
OUTCOME_SEEDS = MappingProxyType({
    OutcomeType.MEETING_BOOKED: (
        "viewing appointment scheduled with client",
        "meeting booked with customer",
        "calendar event created for consultation",
        "property tour arranged",
        "scheduled walkthrough with prospect",
        "appointment confirmed for property showing",
        "client meeting set up",
        "安排看房預約",
        "客戶會議已確認",
        "物業參觀時間已定",
        "諮詢預約成功",
        "已安排睇樓",
        "參觀時間確定",
        "set up property viewing",
        "arranged showing appointment",
        "客戶參觀已安排",
        "預約已確認",
    ),
    OutcomeType.LEAD_CREATED: (
        "new prospect added to CRM",
        "contact form submitted successfully",
        "lead captured from website",
        "inquiry received from potential customer",
        "new contact created in database",
        "prospect information collected",
        "潛在客戶已創建",
        "新線索已收集",
        "表單提交成功",
        "客戶查詢已記錄",
        "新聯絡人已添加",
        "潛在買家資料收集",
        "new client contact added",
        "lead generation successful",
        "收集客戶資料",
    ),
    OutcomeType.TICKET_CREATED: (
        "support ticket opened",
        "maintenance issue logged",
        "customer complaint registered",
        "service request created",
        "problem report submitted",
        "工單已創建",
        "客訴已記錄",
        "維修請求已提交",
        "問題已登記",
        "服務請求已建立",
        "customer issue reported",
        "維護工單開啟",
    ),
    OutcomeType.TICKET_RESOLVED: (
        "support ticket closed",
        "issue resolved successfully",
        "problem fixed and verified",
        "ticket marked as complete",
        "customer issue solved",
        "工單已完成",
        "問題已解決",
        "客訴處理完成",
        "維修已完成",
        "服務請求已結案",
        "issue fixed",
        "問題已處理",
    ),
    OutcomeType.EMAIL_SENT: (
        "automated email delivered",
        "notification message sent",
        "email successfully transmitted",
        "message dispatched to recipient",
        "email campaign delivered",
        "自動郵件已發送",
        "通知訊息已寄出",
        "電郵發送成功",
        "訊息已傳送",
        "郵件已送達",
        "email notification sent",
        "通知郵件發送",
    ),
    OutcomeType.DEAL_WON: (
        "sale successfully closed",
        "contract signed and finalized",
        "deal won and payment received",
        "property sold to buyer",
        "transaction completed",
        "交易成功完成",
        "合約已簽署",
        "銷售成交",
        "物業已售出",
        "交易已完成",
        "sale completed",
        "成功售出",
    ),
})
