from __future__ import annotations

import json
import logging
import time
from pathlib import Path

import typer

from viewfeed.common.run_id import generate_run_id
from viewfeed.common.sanitize import maskSecret
from viewfeed.common.time import getDurationMs
from viewfeed.config.config import Settings, load_settings
from viewfeed.domain.exceptions import FetchFailure, InvalidConfig
from viewfeed.domain.models import ConnectionConfig
from viewfeed.infra.db.dbapi_connector import DbApiConnector
from viewfeed.infra.logging.setup import closeLogger, createCommandLogger, logEvent, mapLogLevel
from viewfeed.infra.views import JsonLinesFileView, ListDataView
from viewfeed.infra.views.jsonl_view import datumToJson
from viewfeed.usecases.fetch_usecase import FetchUseCase

app = typer.Typer(no_args_is_help=True, add_completion=False)


def requireDb(settings: Settings) -> ConnectionConfig:
    """
    Назначение:
        Собирает ConnectionConfig из настроек; при нехватке параметров: exit code 2.
    """
    missing = []
    if not settings.db_driver:
        missing.append("db_driver")
    if not settings.db_name:
        missing.append("db_name")
    if missing:
        typer.echo(f"ERROR: missing DB settings: {', '.join(missing)}", err=True)
        raise typer.Exit(code=2)
    try:
        return ConnectionConfig.from_settings(settings)
    except InvalidConfig as exc:
        typer.echo(f"ERROR: invalid DB settings: {exc}", err=True)
        raise typer.Exit(code=2)


def printRunHeader(runId: str, command: str, settings: Settings, sources: list[str]) -> None:
    """
    Печатает безопасную сводку параметров запуска (пароль маскируется).
    """
    typer.echo(
        f"run_id={runId} command={command} "
        f"driver={settings.db_driver} host={settings.db_host} port={settings.db_port} "
        f"dbname={settings.db_name} username={settings.db_username} "
        f"password={maskSecret(settings.db_password)} sources={sources}"
    )


def runCommand(ctx: typer.Context, commandName: str, runner) -> None:
    """
    Назначение:
        Унифицированная обвязка выполнения команд:
        - создаёт логгер + файл лога
        - печатает заголовок запуска
        - пишет start/done в лог и завершает процесс с кодом runner'а
    """
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]
    sources = ctx.obj["sources"]

    startMonotonic = time.monotonic()
    logger, logFilePath = createCommandLogger(
        commandName=commandName,
        logDir=settings.log_dir,
        runId=runId,
        logLevel=settings.log_level,
    )

    exitCode = 1
    try:
        logEvent(logger, logging.INFO, runId, "core", "Command started")
        printRunHeader(runId, commandName, settings, sources)
        exitCode = runner(logger)
    finally:
        durationMs = getDurationMs(startMonotonic, time.monotonic())
        logEvent(
            logger,
            logging.INFO,
            runId,
            "core",
            f"Command finished exit_code={exitCode} duration_ms={durationMs} log_file={logFilePath}",
        )
        closeLogger(logger)

    if exitCode:
        raise typer.Exit(code=exitCode)


def runCheckDbCommand(ctx: typer.Context) -> None:
    settings: Settings = ctx.obj["settings"]
    runId = ctx.obj["runId"]

    def execute(logger) -> int:
        try:
            config = requireDb(settings)
        except typer.Exit:
            logEvent(logger, logging.ERROR, runId, "config", "Missing or invalid DB settings")
            return 2
        try:
            FetchUseCase(DbApiConnector(batch_size=settings.fetch_batch_size, logger=logger)).check_connection(config, logger, runId)
        except InvalidConfig as exc:
            logEvent(logger, logging.ERROR, runId, "db", f"check-db failed: {exc}")
            typer.echo(f"ERROR: {exc}", err=True)
            return 2
        except Exception as exc:
            logEvent(logger, logging.ERROR, runId, "db", f"check-db failed: {exc}")
            typer.echo("ERROR: database is not reachable (see logs)", err=True)
            return 2
        typer.echo("db=ok")
        return 0

    runCommand(ctx, "check-db", execute)


def runFetchCommand(
    ctx: typer.Context,
    query: str | None,
    params: list[str] | None,
    outPath: str | None,
    show: bool,
) -> None:
    settings: Settings = ctx.obj["settings"]
    runId = ctx.obj["runId"]

    def execute(logger) -> int:
        if not query or not query.strip():
            typer.echo("ERROR: --query is required", err=True)
            return 2
        try:
            config = requireDb(settings)
        except typer.Exit:
            logEvent(logger, logging.ERROR, runId, "config", "Missing or invalid DB settings")
            return 2

        memory = ListDataView(name="memory")
        views: list = [memory]
        if outPath:
            views.append(JsonLinesFileView(outPath, truncate=True))

        try:
            summary = FetchUseCase(DbApiConnector(batch_size=settings.fetch_batch_size, logger=logger)).run(
                config=config,
                query=query,
                views=views,
                logger=logger,
                run_id=runId,
                parameters=tuple(params or ()),
            )
        except FetchFailure as exc:
            typer.echo(f"ERROR: fetch failed at {exc.stage}: {exc.cause}", err=True)
            return 2
        except InvalidConfig as exc:
            typer.echo(f"ERROR: {exc}", err=True)
            return 2

        if show:
            for datum in memory:
                typer.echo(json.dumps(datumToJson(datum), ensure_ascii=False, default=str))
        typer.echo(f"rows={summary['rows']} views={summary['views']}")
        return 0

    runCommand(ctx, "fetch", execute)


@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = typer.Option(None, "--config", help="Path to config.yml"),
    runId: str | None = typer.Option(None, "--run-id", help="Run identifier (UUID). If omitted, generated."),
    logLevel: str | None = typer.Option(None, "--log-level", help="Log level: ERROR|WARN|INFO|DEBUG"),
    logDir: str | None = typer.Option(None, "--log-dir", help="Directory for logs."),
    driver: str | None = typer.Option(None, "--driver", help="Database driver: sqlite|postgresql"),
    host: str | None = typer.Option(None, "--host", help="Database host"),
    port: int | None = typer.Option(None, "--port", help="Database port"),
    username: str | None = typer.Option(None, "--username", help="Database username"),
    password: str | None = typer.Option(None, "--password", help="Database password (avoid; use env/file)"),
    passwordFile: str | None = typer.Option(None, "--password-file", help="Read database password from file"),
    dbname: str | None = typer.Option(None, "--dbname", help="Database name (file path for sqlite)"),
    batchSize: int | None = typer.Option(None, "--batch-size", help="Rows per cursor fetchmany() call"),
):
    """
    Назначение:
        Глобальная инициализация CLI:
        - генерирует/принимает run_id
        - загружает настройки (CLI > ENV > config > defaults)
        - сохраняет всё в ctx.obj для подкоманд
    """
    if passwordFile and not password:
        p = Path(passwordFile)
        if not p.exists() or not p.is_file():
            typer.echo(f"ERROR: password-file not found: {passwordFile}", err=True)
            raise typer.Exit(code=2)
        password = p.read_text(encoding="utf-8").strip()

    cliOverrides = {
        "db_driver": driver,
        "db_host": host,
        "db_port": port,
        "db_username": username,
        "db_password": password,
        "db_name": dbname,
        "log_level": logLevel,
        "log_dir": logDir,
        "fetch_batch_size": batchSize,
    }
    try:
        loaded = load_settings(config_path=config, cli_overrides=cliOverrides)
        mapLogLevel(loaded.settings.log_level)
        if loaded.settings.fetch_batch_size <= 0:
            raise ValueError(f"fetch_batch_size must be positive: {loaded.settings.fetch_batch_size}")
    except ValueError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=2)

    Path(loaded.settings.log_dir).mkdir(parents=True, exist_ok=True)

    ctx.obj = {
        "runId": runId or generate_run_id(),
        "settings": loaded.settings,
        "sources": loaded.sources_used,
        "configPath": config,
    }


@app.command("check-db")
def checkDb(ctx: typer.Context):
    """Проверить подключение к БД (SELECT 1)."""
    runCheckDbCommand(ctx)


@app.command()
def fetch(
    ctx: typer.Context,
    query: str | None = typer.Option(None, "--query", help="SQL query to run"),
    param: list[str] | None = typer.Option(None, "--param", help="Bound query parameter (repeatable). Values are bound as text; use CAST in the query for other types"),
    out: str | None = typer.Option(None, "--out", help="Write fetched rows to a JSON Lines file"),
    show: bool = typer.Option(False, "--show/--no-show", help="Print fetched rows"),
):
    """Выполнить запрос и разложить строки по представлениям."""
    runFetchCommand(ctx, query, param, out, show)
