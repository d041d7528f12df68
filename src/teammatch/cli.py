"""Typer CLI entrypoint for matching and the agents."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, NoReturn, Optional

import typer
from pydantic import BaseModel, ValidationError

from .audit import AuditLogger
from .config import ConfigManager
from .container import MatchContainer, create_container
from .errors import TeamMatchError
from .llm import (
    DEFAULT_CHAT_MODEL,
    DEFAULT_EMBEDDING_MODEL,
    DEFAULT_TIMEOUT_SECONDS,
    OpenAIChatModel,
    OpenAIEmbeddingProvider,
)
from .logging import configure_logging
from .schemas import AgentRequest
from .schemas.config import load_config
from .storage import UserStoreLoader

app = typer.Typer(help="Skill-based teammate matching CLI.")

UsersOption = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Users JSONL path.")
ProjectsOption = typer.Option(None, exists=True, readable=True, dir_okay=False, help="Projects JSONL path.")
ConfigOption = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path (*.yaml).")
LogLevelOption = typer.Option("WARNING", help="Log level for structured logging.")
ApiKeyOption = typer.Option(None, envvar="OPENAI_API_KEY", help="OpenAI API key.", show_default=False)


@app.command()
def match(
    users: Path = UsersOption,
    skill: List[str] = typer.Option(..., "--skill", "-s", help="Skill to search for (repeatable)."),
    limit: int = typer.Option(5, min=1, max=10, help="Maximum matches to return."),
    exclude: Optional[str] = typer.Option(None, help="User id to exclude (the requester)."),
    availability: Optional[str] = typer.Option(None, help="available, busy or part-time."),
    embeddings: bool = typer.Option(False, "--embeddings", help="Rank with OpenAI embeddings."),
    config: Optional[Path] = ConfigOption,
    log_level: str = LogLevelOption,
    openai_api_key: Optional[str] = ApiKeyOption,
) -> None:
    """Rank users against a skill list."""
    configure_logging(log_level)
    settings = _load_settings(config)
    container = _build_container(
        settings,
        users,
        None,
        api_key=openai_api_key,
        with_embeddings=embeddings,
    )
    payload: dict[str, Any] = {"skills": skill, "limit": limit, "use_embeddings": embeddings}
    if exclude:
        payload["exclude_user_id"] = exclude
    if availability:
        payload["availability_filter"] = availability

    try:
        result = container.matching_tool().run(payload)
    except TeamMatchError as exc:
        _fail(exc)
    _echo(result)


@app.command()
def ask(
    users: Path = UsersOption,
    user_id: str = typer.Option(..., "--user-id", help="Requesting user id."),
    message: str = typer.Option("", help="Free-text description of who you are looking for."),
    projects: Optional[Path] = ProjectsOption,
    project_id: Optional[str] = typer.Option(None, "--project-id", help="Project the request is for."),
    approve: Optional[str] = typer.Option(None, help="Approved recipient id from a previous response."),
    confirmed: List[str] = typer.Option([], "--confirmed", help="Ids returned by the previous match (repeatable)."),
    note: Optional[str] = typer.Option(None, help="Custom note for the introduction (max 300 chars)."),
    llm: bool = typer.Option(False, "--llm", help="Let an OpenAI model drive the tools."),
    config: Optional[Path] = ConfigOption,
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
    log_level: str = LogLevelOption,
    openai_api_key: Optional[str] = ApiKeyOption,
) -> None:
    """Run one agent turn and print the structured response."""
    configure_logging(log_level)
    settings = _load_settings(config)
    use_embeddings = bool(settings.get("agent", {}).get("use_embeddings"))
    if llm and not openai_api_key:
        raise typer.BadParameter("--llm requires OPENAI_API_KEY", param_hint="--llm")

    container = _build_container(
        settings,
        users,
        projects,
        api_key=openai_api_key,
        with_embeddings=use_embeddings,
        with_chat=llm,
    )
    try:
        request = AgentRequest(
            message=message,
            user_id=user_id,
            project_id=project_id,
            approved_recipient_id=approve,
            confirmed_match_ids=confirmed,
            custom_note=note,
        )
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    agent = container.llm_agent() if llm else container.bounded_agent()
    response = agent.run(request)

    if audit_log:
        AuditLogger(audit_log).extend(response.tool_call_log, requester_id=user_id)

    _echo(response)
    if not response.success:
        raise typer.Exit(code=1)


@app.command()
def draft(
    users: Path = UsersOption,
    from_user: str = typer.Option(..., "--from", help="Sender user id."),
    to_user: str = typer.Option(..., "--to", help="Recipient user id."),
    projects: Optional[Path] = ProjectsOption,
    project_id: Optional[str] = typer.Option(None, "--project-id", help="Project for context."),
    note: Optional[str] = typer.Option(None, help="Custom note (max 300 chars)."),
    log_level: str = LogLevelOption,
) -> None:
    """Draft an introduction directly, outside of any agent turn."""
    configure_logging(log_level)
    container = _build_container({}, users, projects)
    payload: dict[str, Any] = {"from_user_id": from_user, "to_user_id": to_user}
    if project_id:
        payload["project_id"] = project_id
    if note:
        payload["custom_note"] = note

    try:
        result = container.drafter().run(payload)
    except TeamMatchError as exc:
        _fail(exc)
    _echo(result)


def _load_settings(config: Path | None) -> dict[str, Any]:
    if not config:
        return {}
    try:
        loaded = ConfigManager.load_file(config)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc
    try:
        return load_config(loaded).to_settings()
    except (TypeError, ValidationError) as exc:
        raise typer.BadParameter(f"Invalid config: {exc}", param_hint="--config") from exc


def _build_container(
    settings: dict[str, Any],
    users: Path,
    projects: Path | None,
    *,
    api_key: str | None = None,
    with_embeddings: bool = False,
    with_chat: bool = False,
) -> MatchContainer:
    store = UserStoreLoader().load_lenient(users, projects)

    embedding_provider = None
    if with_embeddings and api_key:
        embed_settings = settings.get("embedding", {})
        embedding_provider = OpenAIEmbeddingProvider(
            api_key=api_key,
            model=embed_settings.get("model", DEFAULT_EMBEDDING_MODEL),
        )

    chat_model = None
    if with_chat and api_key:
        llm_settings = settings.get("llm", {})
        chat_model = OpenAIChatModel(
            api_key=api_key,
            model=llm_settings.get("model", DEFAULT_CHAT_MODEL),
            timeout=llm_settings.get("timeout", DEFAULT_TIMEOUT_SECONDS),
        )

    return create_container(
        settings=settings,
        store=store,
        embedding_provider=embedding_provider,
        chat_model=chat_model,
    )


def _echo(model: BaseModel) -> None:
    typer.echo(json.dumps(model.model_dump(mode="json"), ensure_ascii=False, indent=2))


def _fail(exc: TeamMatchError) -> NoReturn:
    typer.echo(json.dumps({"error": exc.to_dict()}, ensure_ascii=False), err=True)
    raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
