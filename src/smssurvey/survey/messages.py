"""
Outbound SMS wording.
"""

from smssurvey.questions.models import Question
from smssurvey.survey.models import CustomerSurvey

OPT_OUT_DISCLAIMER = "Reply STOP to opt out anytime."
DEFAULT_CALLBACK_TOPIC = "general feedback"
DEFAULT_RETRY_HINT = "Please try again."


def greeting(customer: CustomerSurvey, business_name: str) -> str:
    name = customer.first_name or "there"
    if customer.purchase_item:
        thanks = f"Thanks for purchasing your {customer.purchase_item}"
    else:
        thanks = "Thanks for your recent purchase"
    return f"Hi {name}! {thanks} from {business_name or 'us'}. We'd love your feedback!"


def question_message(
    customer: CustomerSurvey,
    question: Question,
    position: int,
    total: int,
    business_name: str,
    greet: bool = True,
) -> str:
    """Render a question with its ``position/total`` progress indicator.

    The first question is preceded by a greeting and followed by the opt-out
    disclaimer, unless its wording already mentions STOP. ``greet=False``
    skips both for a customer already past the opening message.
    """
    body = f"Q{position}/{total}: {question.sms_text}"
    if position != 1 or not greet:
        return body
    message = f"{greeting(customer, business_name)}\n\n{body}"
    if "STOP" not in question.sms_text:
        message += f"\n\n{OPT_OUT_DISCLAIMER}"
    return message


def retry_message(error: str, help_text: str | None) -> str:
    return f"Please {error}. {help_text or DEFAULT_RETRY_HINT}"


def thank_you_message(business_name: str) -> str:
    return (
        f"Thank you for your feedback! We appreciate your business with "
        f"{business_name or 'us'} and hope you are enjoying your purchase."
    )


def callback_confirmation(topic: str | None) -> str:
    return (
        "Thanks for requesting a manager follow-up! Our store manager will call you "
        f"within 24 hours regarding: {topic or DEFAULT_CALLBACK_TOPIC}"
    )


def opt_out_confirmation(business_name: str) -> str:
    return f"You have been opted out of surveys from {business_name or 'us'}. Thank you for your time."
