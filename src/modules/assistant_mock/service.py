from src.modules.relay.schemas import ChatRequest

SWITCH_AND_LED_REPLY = "\n".join([
    "Sure, I'll add a switch and an LED, and wire them so you can toggle the light.",
    "ACTION: add_switch_at 200 200",
    "ACTION: add_led_at 360 200",
    "ACTION: connect_last_two",
])

DFF_CHAIN_REPLY = "\n".join([
    "Okay, placing a chain of 4 D flip-flops horizontally.",
    "ACTION: place_chain dff 4 200 180 140",
])

DEFAULT_REPLY = (
    "I can help with that. Tell me what components to add "
    "(example: add a switch and an LED)."
)


class MockAssistantService:
    """Scripted replies keyed on phrases in the latest user message."""

    @staticmethod
    def _last_user_prompt(request: ChatRequest) -> str:
        for message in reversed(request.messages):
            if message.role == "user":
                return message.content.lower()
        return ""

    def reply(self, request: ChatRequest) -> str:
        prompt = self._last_user_prompt(request)
        if "switch" in prompt and "led" in prompt:
            return SWITCH_AND_LED_REPLY
        if "dff" in prompt and "chain" in prompt:
            return DFF_CHAIN_REPLY
        return DEFAULT_REPLY


mock_assistant_service = MockAssistantService()
