"""User-facing messages and error presentation."""

from stylist.core.errors import StylistError, TransportError
from stylist.models import ErrorDisplay, ErrorLink

GENERIC_ERROR_MESSAGE = (
    "Samahani, kumeshindikana kutekeleza ombi. Tafadhali jaribu tena."
)

MISSING_PERSON_FOR_SUGGESTION = (
    "Tafadhali pakia picha yako kwanza ili kupata wazo la nguo."
)
MISSING_IMAGES_FOR_GENERATION = "Tafadhali pakia picha ya mtu na picha ya nguo."
MISSING_RESULT_FOR_ENHANCE = "Hakuna picha ya kung'arisha."
WORKFLOW_BUSY = "Ombi jingine linaendelea. Tafadhali subiri limalizike."

LOADING_SUGGESTING = "Inatafuta wazo la nguo..."
LOADING_DRESSING = "Inakuvalisha nguo..."
LOADING_GENERATING = "Inatengeneza muonekano..."
LOADING_ENHANCING = "Inang'arisha picha..."

RESULT_TITLE_NEW = "Muonekano Mpya"
RESULT_TITLE_EMPTY = "Matokeo"

QUOTA_TITLE = "Kiwango cha Matumizi Kimezidishwa / Usage Limit Exceeded"
QUOTA_MESSAGE = (
    "Umezidi kiwango cha matumizi cha sasa cha API. Hii inaweza kuwa kikomo cha muda. "
    "Tafadhali jaribu tena baada ya muda mfupi. "
    "You have exceeded the current API usage quota. This may be a temporary limit. "
    "Please try again shortly."
)
QUOTA_LINKS = [
    ErrorLink(
        label="Jifunze kuhusu Viwango / Learn about rate limits",
        url="https://ai.google.dev/gemini-api/docs/rate-limits",
    ),
    ErrorLink(
        label="Fuatilia Matumizi / Monitor usage",
        url="https://ai.dev/rate-limit",
    ),
]


def present_error(error: BaseException) -> ErrorDisplay:
    """Classify a workflow failure into what the user is shown."""
    if isinstance(error, TransportError) and error.rate_limited:
        return ErrorDisplay(
            kind=error.kind,
            title=QUOTA_TITLE,
            message=QUOTA_MESSAGE,
            links=list(QUOTA_LINKS),
        )

    if isinstance(error, StylistError):
        return ErrorDisplay(kind=error.kind, message=error.message)

    return ErrorDisplay(message=GENERIC_ERROR_MESSAGE)
