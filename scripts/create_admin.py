# scripts/create_admin.py
#
# 사용법 (프로젝트 루트에서 실행):
#   python -m scripts.create_admin init-db
#   python -m scripts.create_admin create-admin -u admin -e admin@example.com
#   python -m scripts.create_admin set-password -u admin

import asyncio
import logging

import typer
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import AsyncSessionLocal, create_db_and_tables, engine
from app.core.exceptions import ConflictError
from app.core.security import get_password_hash
from app.domains.usr import crud as usr_crud
from app.domains.usr import schemas as usr_schemas
from app.domains.usr.models import UserRole

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

cli = typer.Typer(help="RSMS 관리 명령")


async def create_admin_user(db: AsyncSession, user_in: usr_schemas.UserCreate) -> bool:
    """데이터베이스에 관리자 사용자를 생성합니다. 이미 있으면 False."""
    try:
        await usr_crud.user.create(db, obj_in=user_in)
    except ConflictError as e:
        typer.echo(f"오류: {e.detail}")
        return False
    typer.echo(f"관리자 계정이 생성되었습니다: {user_in.username}")
    return True


async def set_user_password(db: AsyncSession, username: str, password: str) -> bool:
    db_user = await usr_crud.user.get_by_username(db, username=username)
    if db_user is None:
        typer.echo(f"오류: 사용자를 찾을 수 없습니다: {username}")
        return False
    db_user.password_hash = get_password_hash(password)
    db.add(db_user)
    await db.commit()
    typer.echo(f"비밀번호가 변경되었습니다: {username}")
    return True


async def _run_with_session(func, *args) -> bool:
    try:
        async with AsyncSessionLocal() as db:
            return await func(db, *args)
    finally:
        await engine.dispose()


@cli.command("init-db")
def init_db():
    """개발용: 스키마(usr, inv, pur, wdn)와 테이블을 생성합니다. 운영 환경에서는 Alembic을 사용하세요."""
    async def run():
        try:
            await create_db_and_tables()
        finally:
            await engine.dispose()

    asyncio.run(run())
    typer.echo("데이터베이스 초기화 완료.")


@cli.command("create-admin")
def create_admin(
    username: str = typer.Option(
        ..., '--username', '-u',
        prompt="관리자 사용자명(ID)을 입력하세요",
        help="로그인 시 사용할 사용자명(ID)입니다."
    ),
    email: str = typer.Option(
        None, '--email', '-e',
        help="관리자 계정의 이메일 주소입니다 (선택)."
    ),
    password: str = typer.Option(
        ..., '--password', '-p',
        prompt="관리자 비밀번호를 입력하세요",
        hide_input=True,
        confirmation_prompt=True,
        help="최소 8자 이상"
    ),
    full_name: str = typer.Option("Admin", '--name', '-n', help="관리자의 이름입니다."),
):
    """RSMS 애플리케이션을 위한 새로운 관리자(ADMIN) 계정을 생성합니다."""
    if len(password) < 8:
        typer.echo("오류: 비밀번호는 최소 8자 이상이어야 합니다.")
        raise typer.Exit(code=1)

    user_data = usr_schemas.UserCreate(
        username=username,
        email=email,
        password=password,
        full_name=full_name,
        role=UserRole.ADMIN,
    )
    if not asyncio.run(_run_with_session(create_admin_user, user_data)):
        raise typer.Exit(code=1)


@cli.command("set-password")
def set_password(
    username: str = typer.Option(..., '--username', '-u', prompt="사용자명(ID)을 입력하세요"),
    password: str = typer.Option(
        ..., '--password', '-p',
        prompt="새 비밀번호를 입력하세요",
        hide_input=True,
        confirmation_prompt=True,
    ),
):
    """기존 사용자의 비밀번호를 변경합니다."""
    if len(password) < 8:
        typer.echo("오류: 비밀번호는 최소 8자 이상이어야 합니다.")
        raise typer.Exit(code=1)
    if not asyncio.run(_run_with_session(set_user_password, username, password)):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    cli()
