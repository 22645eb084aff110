"""
Command-line interface for NeuRazor
"""
import json

import click
import yaml

from core.config import settings
from core.exceptions import NeuRazorError
from database.base import Base
from database.session import engine


def _parse_vars(ctx, param, values):
    """Turn repeated ``name=value`` options into a variable mapping"""
    variables = {}
    for item in values:
        name, sep, raw = item.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected name=value, got '{item}'", ctx=ctx, param=param)
        try:
            variables[name.strip()] = float(raw)
        except ValueError:
            raise click.BadParameter(f"'{raw}' is not a number", ctx=ctx, param=param)
    return variables


@click.group()
@click.version_option(version=settings.app_version)
def cli():
    """NeuRazor CLI - dynamic scoring formulas for cognitive games"""
    pass


@cli.command()
def init_db():
    """Initialize database with tables"""
    import database.models  # noqa: F401  (registers tables on Base)

    click.echo("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    click.echo("Database initialized successfully!")


@cli.command()
@click.option("--host", default="0.0.0.0", help="Host to bind to")
@click.option("--port", default=8000, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload")
def runserver(host: str, port: int, reload: bool):
    """Run the FastAPI development server"""
    import uvicorn

    click.echo(f"Starting NeuRazor server on {host}:{port}")
    click.echo(f"Environment: {settings.environment}")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@cli.command()
@click.argument("formula")
@click.option("--var", "variables", multiple=True, callback=_parse_vars, help="Test variable as name=value")
def validate_formula(formula: str, variables: dict):
    """Validate a formula and optionally evaluate it"""
    from d2_formulas import check_formula, test_formula

    check = check_formula(formula)
    if not check.valid:
        click.echo(f"✗ Invalid formula: {check.error_message}", err=True)
        raise SystemExit(1)

    click.echo("✓ Formula is valid")
    click.echo(f"Variables: {', '.join(sorted(check.variables)) or '(none)'}")

    if variables:
        from d1_extraction import VariableEnvironment

        try:
            environment = VariableEnvironment(variables)
        except NeuRazorError as e:
            click.echo(f"✗ {e.error_code}: {e.message}", err=True)
            raise SystemExit(1)

        outcome = test_formula(formula, environment)
        if not outcome.success:
            click.echo(f"✗ {outcome.error_kind}: {outcome.error_message}", err=True)
            raise SystemExit(1)
        click.echo(f"Result: {outcome.result:g}")


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def check_config(path: str):
    """Validate a YAML scoring configuration file

    The file holds game_type, competency_formulas, final_weights and optional
    settings; an optional test_variables mapping is scored as a preview.
    """
    from d3_scoring.calculator import score_environment
    from d3_scoring.service import validate_configuration
    from d3_scoring.types import ScoringConfiguration

    with open(path) as f:
        try:
            document = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            click.echo(f"✗ Could not parse {path}: {e}", err=True)
            raise SystemExit(1)

    if not isinstance(document, dict):
        click.echo(f"✗ {path} must contain a mapping", err=True)
        raise SystemExit(1)

    try:
        configuration = ScoringConfiguration.from_dict(document.get("game_type", ""), document)
        validate_configuration(configuration)
        click.echo(
            f"✓ {configuration.game_type}: {len(configuration.competency_formulas)} formulas, "
            f"weights sum to {sum(configuration.final_weights.values()):.3f}"
        )

        test_variables = document.get("test_variables")
        if test_variables is not None:
            from d1_extraction import VariableEnvironment

            result = score_environment(configuration, VariableEnvironment(test_variables))
            click.echo(json.dumps(result.to_dict(), indent=2))
    except NeuRazorError as e:
        click.echo(f"✗ {e.error_code}: {e.message}", err=True)
        raise SystemExit(1)


@cli.command()
@click.argument("game_type")
def variables(game_type: str):
    """List variables available to formulas for a game type"""
    from d1_extraction import UnknownGameType, available_variables, supported_game_types

    try:
        catalogue = available_variables(game_type)
    except UnknownGameType:
        click.echo(f"✗ Unknown game type '{game_type}'. Known: {', '.join(supported_game_types())}", err=True)
        raise SystemExit(1)

    width = max(len(name) for name in catalogue)
    for name, description in catalogue.items():
        click.echo(f"{name.ljust(width)}  {description}")


@cli.command()
def env_info():
    """Display environment information"""
    from d1_extraction import supported_game_types

    click.echo(f"NeuRazor v{settings.app_version}")
    click.echo(f"Environment: {settings.environment}")
    click.echo(f"Database: {settings.database_url}")
    click.echo(f"Log format: {settings.log_format}")
    click.echo(f"Metrics enabled: {settings.prometheus_enabled}")
    click.echo(f"Game types: {', '.join(supported_game_types())}")


def main():
    """Main entry point"""
    cli()


if __name__ == "__main__":
    main()
