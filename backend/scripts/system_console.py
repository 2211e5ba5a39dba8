"""리포트 업로드 콘솔.

Google 로그인 → 콜백 URL 붙여넣기 → 리포트 업로드 순서로 사용합니다.
세션은 SESSION_FILE (기본: ~/.haven-admin-session.json) 에 저장됩니다.

사용법:
    cd backend
    python scripts/system_console.py login-url
    python scripts/system_console.py callback "https://.../system#access_token=..."
    python scripts/system_console.py status
    python scripts/system_console.py upload --pdf report.pdf --slug acme-cycle-2 ...
    python scripts/system_console.py logout
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).parent.parent))

from console import ConsoleError, ReportDraft, ReportUploader
from core.config import get_settings
from integrations.supabase import SessionConfigError, SessionManager
from schemas import SECTORS
from services import split_list


def cmd_login_url(manager: SessionManager, args) -> int:
    print(manager.sign_in_url(args.redirect_to))
    return 0


def cmd_callback(manager: SessionManager, args) -> int:
    session = manager.capture_callback(args.url)
    if session is None:
        print("콜백 URL 에 access_token / refresh_token / expires_in 이 없습니다.")
        return 1
    print("로그인 세션 저장 완료")
    return 0


async def cmd_status(manager: SessionManager, args) -> int:
    session = await manager.sync()
    if session is None:
        print("Not signed in.")
        return 1
    print(f"Signed in {'as ' + session.email if session.email else 'successfully'}.")
    return 0


def cmd_logout(manager: SessionManager, args) -> int:
    manager.clear()
    print("Signed out.")
    return 0


async def cmd_upload(manager: SessionManager, args) -> int:
    draft = ReportDraft(
        slug=args.slug,
        company=args.company,
        ticker=args.ticker,
        sector=args.sector,
        cycle=args.cycle,
        analyst=args.analyst,
        publish_date=args.publish_date,
        summary=args.summary,
        thesis=args.thesis,
        key_risks=split_list(args.key_risks),
        sources=split_list(args.sources),
    )
    uploader = ReportUploader(manager, settings=manager.settings)
    pdf_url = await uploader.upload(draft, Path(args.pdf))
    print(f"Report uploaded successfully. PDF URL: {pdf_url}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="HAVEN 리포트 업로드 콘솔")
    sub = parser.add_subparsers(dest="command")

    login = sub.add_parser("login-url", help="Google 로그인 URL 출력")
    login.add_argument("--redirect-to", default=None, help="로그인 후 이동할 URL")

    callback = sub.add_parser("callback", help="로그인 후 리다이렉트된 URL 로 세션 저장")
    callback.add_argument("url", help="콜백 URL 또는 #fragment")

    sub.add_parser("status", help="로그인 상태 확인 (만료 시 자동 갱신)")
    sub.add_parser("logout", help="세션 삭제")

    upload = sub.add_parser("upload", help="리포트 업로드")
    upload.add_argument("--pdf", required=True, help="PDF 파일 경로")
    upload.add_argument("--slug", required=True)
    upload.add_argument("--company", required=True)
    upload.add_argument("--ticker", required=True)
    upload.add_argument("--sector", default="Technology", choices=SECTORS)
    upload.add_argument("--cycle", type=int, default=1)
    upload.add_argument("--analyst", required=True)
    upload.add_argument("--publish-date", required=True, help="YYYY-MM-DD")
    upload.add_argument("--summary", required=True)
    upload.add_argument("--thesis", required=True)
    upload.add_argument("--key-risks", default="", help="줄바꿈, | 또는 , 로 구분")
    upload.add_argument("--sources", default="", help="줄바꿈, | 또는 , 로 구분")
    return parser


async def main(argv: Optional[list[str]] = None, manager: Optional[SessionManager] = None) -> int:
    logging.basicConfig(level=logging.WARNING)
    parser = build_parser()
    args = parser.parse_args(argv)

    manager = manager or SessionManager(get_settings())
    try:
        if args.command == "login-url":
            return cmd_login_url(manager, args)
        elif args.command == "callback":
            return cmd_callback(manager, args)
        elif args.command == "status":
            return await cmd_status(manager, args)
        elif args.command == "logout":
            return cmd_logout(manager, args)
        elif args.command == "upload":
            return await cmd_upload(manager, args)
        parser.print_help()
        return 1
    except (ConsoleError, SessionConfigError) as e:
        print(e)
        return 1
    finally:
        await manager.close()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
