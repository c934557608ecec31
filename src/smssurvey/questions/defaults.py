"""
Default six-question satisfaction survey seeded at start-up.
"""

from smssurvey.questions.models import (
    QuestionDefinition,
    QuestionRole,
    QuestionType,
    QuestionValidation,
)


def default_questions(business_name: str = "us") -> list[QuestionDefinition]:
    """Build the default survey, naming ``business_name`` where the wording needs it."""
    return [
        QuestionDefinition(
            type=QuestionType.RATING,
            prompt_text="Please rate your overall purchase experience on a scale of 1-5 stars",
            sms_text="Please rate your overall purchase experience. Reply with 1-5 (5 being the best).",
            validation=QuestionValidation(min_value=1, max_value=5),
            help_text="1=Poor, 2=Fair, 3=Good, 4=Very Good, 5=Excellent",
            role=QuestionRole.RATING,
        ),
        QuestionDefinition(
            type=QuestionType.MULTIPLE_CHOICE,
            prompt_text="In what areas could we have improved your experience the most?",
            sms_text=(
                "What could we improve? Reply A, B, C, D, or E:\n"
                "A) Sales associate experience\n"
                "B) Product quality\n"
                "C) Paperwork process\n"
                "D) Everything was great!\n"
                "E) Other"
            ),
            options=(
                "Experience with your sales associate",
                "Quality of your purchase",
                "The paperwork process",
                "Everything was great!",
                "Other (please specify)",
            ),
        ),
        QuestionDefinition(
            type=QuestionType.MULTIPLE_CHOICE,
            prompt_text="Have you received a follow up call from your sales associate?",
            sms_text=(
                "Have you received a follow-up call from your sales associate? Reply:\n"
                "A) Yes, we spoke\n"
                "B) Yes, left message\n"
                "C) No follow-up yet"
            ),
            options=(
                "Yes, and I have spoken with my sales associate",
                "Yes, but they left a message and we haven't spoken yet",
                "No, there has been no follow up call or message left",
            ),
        ),
        QuestionDefinition(
            type=QuestionType.NPS_SCALE,
            prompt_text="How likely would you recommend us to a friend? (Net Promoter Score)",
            sms_text=(
                f"On a scale of 0-10, how likely would you recommend {business_name} "
                "to a friend or colleague? (0=Not likely, 10=Extremely likely)"
            ),
            validation=QuestionValidation(min_value=0, max_value=10),
            help_text="0-6=Detractor, 7-8=Passive, 9-10=Promoter",
            role=QuestionRole.NPS,
        ),
        QuestionDefinition(
            type=QuestionType.OPEN_TEXT,
            prompt_text="Is there anything that would have made your experience with us better?",
            sms_text=(
                "Is there anything that would have made your experience with us better? "
                "Please share your thoughts or reply NONE if no suggestions."
            ),
            validation=QuestionValidation(required=False, max_length=320),
        ),
        QuestionDefinition(
            type=QuestionType.YES_NO_WITH_TEXT,
            prompt_text="Would you like the store manager to call and follow up with you personally?",
            sms_text=(
                "Would you like the store manager to call you personally? Reply:\n"
                "A) No thanks, I'm set!\n"
                "B) Yes, please call me\n\n"
                "If B, please briefly describe the topic."
            ),
            role=QuestionRole.CALLBACK,
        ),
    ]
