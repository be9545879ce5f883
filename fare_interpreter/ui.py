from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from grammar.models import EvaluationResult, GrammarDefinition, GrammarMessages

console = Console()


def render_verdict(result: EvaluationResult, messages: GrammarMessages, fare: str) -> str:
    """Fill the accepted/rejected template for one evaluation."""
    template = messages.accepted if result.matched else messages.rejected
    return template.format(input=result.input, fare=fare)


def print_verdict(result: EvaluationResult, messages: GrammarMessages, fare: str) -> None:
    border = "green" if result.matched else "red"
    console.print(Panel.fit(render_verdict(result, messages, fare), border_style=border))


def print_malformed(result: EvaluationResult) -> None:
    console.print(Panel.fit(f"Malformed input: {result.error}", border_style="red"))


def print_grammar_table(grammars: list[GrammarDefinition]) -> None:
    table = Table(title="Grammars")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Roles")
    table.add_column("Enabled")

    for grammar in grammars:
        table.add_row(
            grammar.id,
            grammar.name,
            ", ".join(role.name for role in grammar.roles),
            "yes" if grammar.enabled else "no",
        )

    console.print(table)
