"""CLI entry point using Click."""

from __future__ import annotations

from pathlib import Path

import click
import yaml

from tui_gantt.models import VIEW_MODES


class _DefaultGroup(click.Group):
    """Insert 'run' when the first arg is not a registered subcommand."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.no_args_is_help = False

    def invoke(self, ctx):
        if not ctx._protected_args and not ctx.args:
            ctx._protected_args = ["run"]
        return super().invoke(ctx)

    def resolve_command(self, ctx, args):
        cmd_name = args[0] if args else None
        if cmd_name and cmd_name in self.commands:
            return super().resolve_command(ctx, args)
        return super().resolve_command(ctx, ["run"] + list(args))


def _check_project_dir(path: str) -> Path:
    project_dir = Path(path).resolve()
    if not project_dir.exists():
        if click.confirm(f"'{project_dir}' does not exist. Create it?"):
            project_dir.mkdir(parents=True, exist_ok=True)
            click.echo(f"Created folder: {project_dir}")
        else:
            raise SystemExit(0)
    elif not project_dir.is_dir():
        click.echo(f"Error: '{project_dir}' is not a directory.", err=True)
        raise SystemExit(1)
    return project_dir


@click.group(cls=_DefaultGroup)
@click.option("--no-color", is_flag=True, help="Disable color output")
@click.option("--demo", is_flag=True, help="Launch with demo tasks")
@click.option(
    "--view-mode",
    type=click.Choice([m.value for m in VIEW_MODES], case_sensitive=False),
    default=None,
    help="Initial view mode (overrides the project config)",
)
@click.version_option(package_name="tui-gantt")
@click.pass_context
def main(ctx, no_color: bool, demo: bool, view_mode: str | None) -> None:
    """TUI Gantt - Interactive terminal Gantt chart."""
    ctx.ensure_object(dict)
    ctx.obj["no_color"] = no_color
    ctx.obj["demo"] = demo
    ctx.obj["view_mode"] = view_mode


@main.command()
@click.argument("path", default=".", type=click.Path())
@click.pass_context
def run(ctx, path: str) -> None:
    """Open a task list. PATH is a YAML file or a folder holding tasks.yaml."""
    from tui_gantt.app import GanttApp
    from tui_gantt.config import load_options, load_task_records, resolve_tasks_path
    from tui_gantt.models import GanttOptions, ViewMode

    no_color = ctx.obj["no_color"]
    view_mode = ViewMode.parse(ctx.obj["view_mode"]) if ctx.obj["view_mode"] else None

    if ctx.obj["demo"]:
        from tui_gantt.demo_data import demo_records

        options = GanttOptions()
        if view_mode is not None:
            options.view_mode = view_mode
        app = GanttApp(demo_records(), options=options, no_color=no_color, demo_mode=True)
        app.run()
        return

    tasks_path = resolve_tasks_path(Path(path).resolve())
    if not tasks_path.is_file():
        click.echo(f"Error: task file not found: {tasks_path}", err=True)
        raise SystemExit(1)
    try:
        records = load_task_records(tasks_path)
    except (OSError, yaml.YAMLError) as e:
        click.echo(f"Error: cannot read {tasks_path}: {e}", err=True)
        raise SystemExit(1)

    project_dir = tasks_path.parent
    options = load_options(project_dir)
    if view_mode is not None:
        options.view_mode = view_mode
    app = GanttApp(records, project_dir=project_dir, options=options, no_color=no_color)
    app.run()


@main.command("init-config")
@click.argument("path", default=".", type=click.Path())
@click.pass_context
def init_config_cmd(ctx, path: str) -> None:
    """Write .tui-gantt/config.toml with the default chart options."""
    from tui_gantt.config import CONFIG_DIR, CONFIG_FILE, save_options
    from tui_gantt.models import GanttOptions, ViewMode

    project_dir = _check_project_dir(path)
    config_path = project_dir / CONFIG_DIR / CONFIG_FILE
    if config_path.exists():
        click.echo(f"Already exists: {config_path}", err=True)
        raise SystemExit(1)

    options = GanttOptions()
    if ctx.obj.get("view_mode"):
        options.view_mode = ViewMode.parse(ctx.obj["view_mode"])
    save_options(project_dir, options)
    click.echo(f"Created {config_path}")


@main.command("init-theme")
@click.argument("path", default=".", type=click.Path())
def init_theme_cmd(path: str) -> None:
    """Copy default theme to .tui-gantt/theme.yaml for customization."""
    from tui_gantt.theme import init_theme

    project_dir = _check_project_dir(path)
    try:
        dest = init_theme(project_dir)
        click.echo(f"Created {dest}")
    except FileExistsError as e:
        click.echo(f"Already exists: {e}", err=True)
        raise SystemExit(1)
