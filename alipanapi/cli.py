"""
alipanapi CLI：认证一次保存到本地，之后所有命令使用保存的 token 与 drive_id。
"""

from __future__ import annotations

import getpass
import logging
from typing import Annotated, Optional

import typer

from alipanapi import FileEntity, FileList, FileListParam, PanApiError, PanClient, WebToken
from alipanapi.cli_config import clear_config, load_config, save_config


def _format_size(n: int) -> str:
    """将字节数格式化为人类可读（KiB/MiB/GiB）。"""
    if n < 1024:
        return f"{n} B"
    if n < 1024 * 1024:
        return f"{n / 1024:.1f} KiB"
    if n < 1024 * 1024 * 1024:
        return f"{n / (1024 * 1024):.1f} MiB"
    return f"{n / (1024 * 1024 * 1024):.1f} GiB"


def _format_entry(f: FileEntity) -> str:
    kind = "d" if f.is_folder() else "-"
    size = "-" if f.is_folder() else _format_size(f.file_size)
    return f"  {kind}  {size:>10}  {f.updated_at or '-':19}  {f.file_name}"


def _format_summary(files: FileList) -> str:
    file_n, directory_n = files.counts()
    return f"{directory_n} folder(s), {file_n} file(s), {_format_size(files.total_size())}"


app = typer.Typer(
    name="alipan",
    help="Aliyun Drive file API CLI. Save the access token once; use it for all commands.",
)

# 可选参数：覆盖保存的 drive_id
_drive_id_option: type = Annotated[
    Optional[str],
    typer.Option("--drive-id", "-d", help="Override saved drive id"),
]


@app.callback()
def _main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log requests to stderr")] = False,
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")


def _get_client() -> PanClient | None:
    cfg = load_config()
    if not cfg:
        return None
    token = WebToken(cfg["access_token"], token_type=cfg.get("token_type") or "Bearer")
    if cfg.get("api_url"):
        return PanClient(token, api_url=cfg["api_url"], timeout=30.0)
    return PanClient(token, timeout=30.0)


def _require_client(drive_id: str | None) -> tuple[PanClient, str]:
    client = _get_client()
    if client is None:
        typer.echo("error: no saved credentials. run 'alipan login'", err=True)
        raise typer.Exit(1)
    cfg = load_config() or {}
    drive_id = drive_id or cfg.get("drive_id")
    if not drive_id:
        client.close()
        typer.echo("error: no drive id. run 'alipan login' or pass --drive-id", err=True)
        raise typer.Exit(1)
    return client, drive_id


# ------------------------- login / logout / auth -------------------------


@app.command("login", help="Save access token and drive id to local config")
def login(
    access_token: Annotated[Optional[str], typer.Option("--access-token", "-t", help="Access token (unsafe in shell)")] = None,
    drive_id: Annotated[Optional[str], typer.Option("--drive-id", "-d", help="Default drive id")] = None,
    api_url: Annotated[Optional[str], typer.Option("--api-url", help="Override API base URL")] = None,
) -> None:
    access_token = access_token or getpass.getpass("Access token: ").strip()
    if not access_token:
        typer.echo("error: access token required", err=True)
        raise typer.Exit(1)
    drive_id = drive_id or input("Drive id: ").strip()
    if not drive_id:
        typer.echo("error: drive id required", err=True)
        raise typer.Exit(1)
    save_config(access_token, drive_id, api_url=api_url)
    typer.echo("Saved.")


@app.command("logout", help="Clear saved credentials")
def logout() -> None:
    if clear_config():
        typer.echo("Cleared.")
    else:
        typer.echo("No saved credentials.")


auth_app = typer.Typer(help="Auth subcommands")
app.add_typer(auth_app, name="auth")


@auth_app.command("status", help="Show whether credentials are saved")
def auth_status() -> None:
    cfg = load_config()
    if not cfg:
        typer.echo("Not logged in.")
        return
    typer.echo(f"drive_id: {cfg.get('drive_id', '')}")
    typer.echo("auth: yes")


@app.command("info", help="Show saved drive id and API URL")
def info_cmd() -> None:
    cfg = load_config()
    if not cfg:
        typer.echo("Not logged in. Run 'alipan login'.")
        return
    typer.echo(f"drive_id: {cfg.get('drive_id', '')}")
    typer.echo(f"api_url: {cfg.get('api_url') or 'default'}")


# ------------------------- list / ls -------------------------


def _cmd_list_impl(path: str, drive_id: str | None) -> None:
    client, drive_id = _require_client(drive_id)
    try:
        folder = client.file_info_by_path(drive_id, path or "/")
        if folder.is_folder():
            files = client.file_list_get_all(FileListParam(drive_id=drive_id, parent_file_id=folder.file_id))
        else:
            files = FileList([folder])
    except PanApiError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        client.close()
    for f in files:
        if f is not None:
            typer.echo(_format_entry(f))
    typer.echo(_format_summary(files))


@app.command("list", help="List directory")
def list_cmd(
    path: Annotated[str, typer.Argument(help="Absolute path (default: /)")] = "/",
    drive_id: _drive_id_option = None,
) -> None:
    _cmd_list_impl(path, drive_id)


@app.command("ls", help="Alias for list")
def ls_cmd(
    path: Annotated[str, typer.Argument(help="Absolute path (default: /)")] = "/",
    drive_id: _drive_id_option = None,
) -> None:
    _cmd_list_impl(path, drive_id)


# ------------------------- stat -------------------------


@app.command("stat", help="Show file info by absolute path or file id")
def stat_cmd(
    path: Annotated[Optional[str], typer.Argument(help="Absolute path")] = None,
    file_id: Annotated[Optional[str], typer.Option("--id", help="File id instead of path")] = None,
    drive_id: _drive_id_option = None,
) -> None:
    if not path and not file_id:
        typer.echo("error: path or --id required", err=True)
        raise typer.Exit(1)
    client, drive_id = _require_client(drive_id)
    try:
        if file_id:
            entity = client.file_info_by_id(drive_id, file_id)
        else:
            entity = client.file_info_by_path(drive_id, path or "/")
    except PanApiError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        client.close()
    typer.echo(str(entity), nl=False)
    if entity.is_file():
        typer.echo(f"文件大小: {_format_size(entity.file_size)}")
        if entity.content_hash:
            typer.echo(f"{entity.content_hash_name or 'sha1'}: {entity.content_hash}")
    if entity.updated_at:
        typer.echo(f"修改时间: {entity.updated_at}")


# ------------------------- tree / du -------------------------


@app.command("tree", help="Walk a directory recursively and print every entry")
def tree_cmd(
    path: Annotated[str, typer.Argument(help="Absolute path (default: /)")] = "/",
    drive_id: _drive_id_option = None,
    max_depth: Annotated[Optional[int], typer.Option("--max-depth", "-L", min=0, help="Do not descend below this depth")] = None,
) -> None:
    client, drive_id = _require_client(drive_id)
    failed: list[PanApiError] = []

    def on_entry(depth: int, full_path: str, entity: FileEntity | None, error: PanApiError | None) -> bool:
        if error is not None:
            failed.append(error)
            typer.echo(f"error: {full_path}: {error}", err=True)
            return False
        name = "/" if entity.is_drive_root_folder() else entity.file_name
        suffix = "/" if entity.is_folder() and name != "/" else ""
        typer.echo(f"{'  ' * depth}{name}{suffix}")
        return True

    try:
        files = client.files_directories_recurse_list(drive_id, path or "/", on_entry, max_depth=max_depth)
    finally:
        client.close()
    if failed or files is None:
        raise typer.Exit(1)
    typer.echo(_format_summary(files))


@app.command("du", help="Show total size and file/folder counts under a path")
def du_cmd(
    path: Annotated[str, typer.Argument(help="Absolute path (default: /)")] = "/",
    drive_id: _drive_id_option = None,
) -> None:
    client, drive_id = _require_client(drive_id)
    failed: list[PanApiError] = []

    def on_entry(depth: int, full_path: str, entity: FileEntity | None, error: PanApiError | None) -> bool:
        if error is not None:
            failed.append(error)
            typer.echo(f"error: {full_path}: {error}", err=True)
            return False
        return True

    try:
        files = client.files_directories_recurse_list(drive_id, path or "/", on_entry)
    finally:
        client.close()
    if failed or files is None:
        raise typer.Exit(1)
    typer.echo(f"{path or '/'}: {_format_summary(files)}")


# ------------------------- main -------------------------


def main() -> None:
    app()


if __name__ == "__main__":
    main()
