from typing import Callable

from castmap.prompts.base import InverseRolePrompt


class ConsolePrompt:
    """Asks for inverse roles on the terminal.

    Answers can be a suggestion number, a free-text role, `?text` to filter the
    suggestions, or an empty line to cancel.
    """

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ) -> None:
        self.input_func = input_func
        self.output_func = output_func

    def ask(self, request: InverseRolePrompt) -> str | None:
        self.output_func(request.question())
        suggestions = request.suggest()

        while True:
            for number, suggestion in enumerate(suggestions, start=1):
                self.output_func(f"  {number}. {suggestion}")

            answer = self.input_func("Inverse role (number, text, ?filter, empty to cancel): ")
            answer = answer.strip()
            if not answer:
                return None
            if answer.startswith("?"):
                suggestions = request.suggest(answer[1:])
                continue
            if answer.isdigit() and 1 <= int(answer) <= len(suggestions):
                return suggestions[int(answer) - 1]
            return answer
