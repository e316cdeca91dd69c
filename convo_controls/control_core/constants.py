"""Constants for the dialog control core.

Names shared between handlers, acts and persisted state live here so that the
serialized form of a control's state stays stable across releases.
"""

# Built-in interaction-model tags
TAG_TARGET_IT = "builtin_it"
TAG_ACTION_SET = "builtin_set"

DEFAULT_TARGET_TAGS = frozenset({TAG_TARGET_IT})
DEFAULT_ACTION_TAGS = frozenset({TAG_ACTION_SET})

# Event kinds (wire values)
EVENT_LAUNCH = "launch"
EVENT_GENERAL_REFERENCE = "generalReference"
EVENT_EXPLICIT_CHOICE = "explicitChoice"

POLARITY_AFFIRM = "affirm"
POLARITY_DENY = "deny"

# Initiative act names recorded in FocusState.active_initiative_name
ACT_ASK_QUESTION = "AskQuestion"
ACT_CONFIRM_ANSWER = "ConfirmAnswer"
ACT_ANSWER_CONFIRMED = "AnswerConfirmed"
ACT_ANSWER_DISCONFIRMED = "AnswerDisconfirmed"

# Built-in handler names
HANDLER_LAUNCH = "launch"
HANDLER_DIRECT_ANSWER_IMPLIED = "direct_answer_implied"
HANDLER_DIRECT_ANSWER_EXPLICIT = "direct_answer_explicit"
HANDLER_IMPLIED_DENY = "direct_answer_implied_deny"
HANDLER_CONFIRMATION_AFFIRMED = "confirmation_affirmed"
HANDLER_CONFIRMATION_DISCONFIRMED = "confirmation_disconfirmed"
HANDLER_FOCUS_QUESTION = "focus_question"
INITIATIVE_ASK_QUESTION = "ask_question"
INITIATIVE_CONFIRM_ANSWER = "confirm_answer"
