"""CLI for the walkthrough engine."""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from circl_walkthrough.core.config import Config
from circl_walkthrough.core.logging import setup_logging
from circl_walkthrough.tutorial.classifier import classify as classify_answers
from circl_walkthrough.tutorial.content import MINUTE_MS, TutorialCatalog
from circl_walkthrough.tutorial.orchestrator import TutorialOrchestrator
from circl_walkthrough.tutorial.store import (
    KEY_CURRENT_FLOW,
    KEY_CURRENT_STEP,
    KEY_JUST_COMPLETED_ONBOARDING,
    KEY_ONBOARDING_COMPLETED,
    KEY_USER_TYPE,
    JsonPreferenceStore,
    completion_key,
)
from circl_walkthrough.tutorial.views import OnboardingAnswers, Persona, TutorialStatus

console = Console()

PERSONA_CHOICE = click.Choice([persona.value for persona in Persona], case_sensitive=False)


def _open_store(ctx: click.Context) -> JsonPreferenceStore:
    return JsonPreferenceStore(ctx.obj["prefs"])


def _build_orchestrator(ctx: click.Context, store: JsonPreferenceStore) -> TutorialOrchestrator:
    config: Config = ctx.obj["config"]
    orchestrator = TutorialOrchestrator(
        store=store,
        default_persona=config.walkthrough.default_persona,
    )
    orchestrator.set_navigation_callback(
        lambda destination: console.print(f"[magenta]🧭 Navigate to:[/magenta] {destination}")
    )
    return orchestrator


@click.group()
@click.option("--prefs", "-p", default=None, type=click.Path(dir_okay=False),
              help="Preferences file (defaults to the configured location)")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, prefs: Optional[str], verbose: bool):
    """🎓 Circl Walkthrough - persona-driven app tutorials."""
    config = Config.from_env()
    setup_logging(
        level="DEBUG" if verbose else config.log_level,
        log_file=config.log_file,
        json_logs=config.json_logs,
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["prefs"] = Path(prefs) if prefs else config.store.path


@cli.command()
@click.option("--usage", "-u", required=True, help="Main usage interests, e.g. 'Find Mentors'")
@click.option("--industry", "-i", default="", help="Industry interests")
@click.option("--location", "-l", default="", help="User location")
@click.option("--goals", "-g", default=None, help="Free-text goals")
@click.pass_context
def onboard(ctx: click.Context, usage: str, industry: str, location: str, goals: Optional[str]):
    """
    Record onboarding answers the way the onboarding flow does.

    Detects the persona and flags that onboarding just finished, so the
    next `walk` starts the tutorial automatically.
    """
    store = _open_store(ctx)
    orchestrator = _build_orchestrator(ctx, store)

    answers = OnboardingAnswers(
        usage_interests=usage,
        industry_interests=industry,
        location=location,
        user_goals=goals,
    )
    persona = orchestrator.detect_and_set_user_type(answers)

    store.put(KEY_JUST_COMPLETED_ONBOARDING, True)
    store.put(KEY_ONBOARDING_COMPLETED, True)

    console.print(Panel(
        f"[yellow]Usage:[/yellow] {usage}\n"
        f"[yellow]Industry:[/yellow] {industry or '-'}\n\n"
        f"[bold]Detected persona:[/bold] [green]{persona.display_name}[/green] ({persona.value})",
        title="✅ Onboarding Completed",
        border_style="green"
    ))


@cli.command()
@click.option("--usage", "-u", default="", help="Main usage interests")
@click.option("--industry", "-i", default="", help="Industry interests")
def classify(usage: str, industry: str):
    """Print the persona for a set of answers without saving anything."""
    persona = classify_answers(OnboardingAnswers(usage_interests=usage, industry_interests=industry))
    console.print(f"{persona.value} [dim]({persona.display_name})[/dim]")


@cli.command()
@click.pass_context
def flows(ctx: click.Context):
    """List the tutorial flow of every persona."""
    store = _open_store(ctx)
    catalog = TutorialCatalog()

    table = Table(title="Tutorial Flows")
    table.add_column("Persona", style="cyan")
    table.add_column("Title", style="white")
    table.add_column("Steps", style="green")
    table.add_column("Minutes", style="green")
    table.add_column("Status", style="yellow")

    for persona in catalog.personas:
        flow = catalog.build_flow(persona)
        completed = store.get_bool(completion_key(flow.persona))
        table.add_row(
            persona.value,
            flow.title,
            str(flow.step_count),
            str(flow.estimated_duration // MINUTE_MS),
            "✓ Completed" if completed else "-",
        )

    console.print(table)


@cli.command()
@click.argument("persona", type=PERSONA_CHOICE)
def show(persona: str):
    """Show the steps of a persona's tutorial flow."""
    flow = TutorialCatalog().build_flow(Persona(persona.upper()))

    console.print(Panel(
        f"[bold]{flow.title}[/bold]\n{flow.description}",
        title=f"📚 {Persona(persona.upper()).display_name}",
        border_style="cyan"
    ))

    table = Table()
    table.add_column("#", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Target", style="white")
    table.add_column("Navigate", style="magenta")
    table.add_column("Tooltip", style="white")
    table.add_column("Interactive", style="yellow")

    for i, step in enumerate(flow.steps, 1):
        table.add_row(
            str(i),
            step.title,
            step.target_view,
            step.navigation_destination or "-",
            step.tooltip_alignment.value,
            "yes" if step.is_interactive else "",
        )

    console.print(table)


@cli.command()
@click.pass_context
def status(ctx: click.Context):
    """Show persisted tutorial state."""
    store = _open_store(ctx)

    table = Table(title=f"Tutorial State ({ctx.obj['prefs']})")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Detected persona", str(store.get(KEY_USER_TYPE, "-")))
    table.add_row("Saved flow", str(store.get(KEY_CURRENT_FLOW, "-")))
    table.add_row("Saved step", str(store.get(KEY_CURRENT_STEP, "-")))
    table.add_row("Onboarding completed", str(store.get_bool(KEY_ONBOARDING_COMPLETED)))
    table.add_row("Just completed onboarding", str(store.get_bool(KEY_JUST_COMPLETED_ONBOARDING)))

    for persona in Persona:
        if store.get_bool(completion_key(persona)):
            table.add_row(f"Completed: {persona.display_name}", "[green]✓[/green]")

    console.print(table)


@cli.command()
@click.option("--persona", "-P", default=None, type=PERSONA_CHOICE,
              help="Walk this persona's tutorial instead of the detected one")
@click.pass_context
def walk(ctx: click.Context, persona: Optional[str]):
    """
    Walk through the tutorial interactively.

    Without --persona the detected persona's tutorial is shown, unless it
    was already completed.
    """
    config: Config = ctx.obj["config"]
    store = _open_store(ctx)
    orchestrator = _build_orchestrator(ctx, store)

    if persona:
        started = orchestrator.start(Persona(persona.upper()))
    else:
        started = config.walkthrough.auto_trigger and orchestrator.check_and_trigger()
        if not started:
            started = orchestrator.start()

    if not started:
        console.print(
            f"[yellow]The {orchestrator.user_type.display_name} tutorial was already completed.[/yellow]\n"
            f"[dim]Use 'restart {orchestrator.user_type.value}' to see it again.[/dim]"
        )
        return

    _run_walkthrough(orchestrator)


@cli.command()
@click.argument("persona", type=PERSONA_CHOICE)
@click.pass_context
def restart(ctx: click.Context, persona: str):
    """Clear completion for a persona and walk its tutorial again."""
    store = _open_store(ctx)
    orchestrator = _build_orchestrator(ctx, store)

    if orchestrator.restart(Persona(persona.upper())):
        _run_walkthrough(orchestrator)


@cli.command()
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def reset(ctx: click.Context, yes: bool):
    """Forget all tutorial progress, completion and the detected persona."""
    if not yes and not click.confirm("Reset all tutorial state?"):
        return

    store = _open_store(ctx)
    orchestrator = _build_orchestrator(ctx, store)
    orchestrator.reset_all_tutorial_state()
    console.print("[green]🔄 Tutorial state reset.[/green]")


def _run_walkthrough(orchestrator: TutorialOrchestrator) -> None:
    """Prompt through the active flow until it ends or the user quits."""
    while orchestrator.is_showing_tutorial:
        flow = orchestrator.current_flow
        step = orchestrator.current_step
        index = orchestrator.current_step_index

        seen = [s.id for s in flow.steps[:index]]
        progress = flow.calculate_progress(seen)

        body = f"[dim]{step.description}[/dim]\n\n{step.message}"
        if step.is_interactive:
            body += "\n\n[yellow]👆 Try it yourself before moving on.[/yellow]"

        console.print(Panel(
            body,
            title=f"Step {index + 1}/{flow.step_count}: {step.title}",
            subtitle=f"{progress:.0%} complete",
            border_style="cyan"
        ))

        choice = Prompt.ask(
            "[n]ext, [p]revious, [s]kip, [q]uit",
            choices=["n", "p", "s", "q"],
            default="n",
            console=console,
        )
        if choice == "n":
            orchestrator.next_step()
        elif choice == "p":
            orchestrator.previous_step()
        elif choice == "s":
            orchestrator.skip()
        else:
            console.print(f"[dim]Walkthrough paused at step {index + 1}. Run 'walk' to start it again.[/dim]")
            return

    if orchestrator.state.status is TutorialStatus.COMPLETED:
        console.print("[bold green]🎉 Tutorial completed![/bold green]")
    elif orchestrator.state.status is TutorialStatus.SKIPPED:
        console.print("[yellow]Tutorial skipped. Restart it anytime with 'restart'.[/yellow]")


def main():
    """Main entry point for the walkthrough CLI."""
    cli()


if __name__ == "__main__":
    main()
