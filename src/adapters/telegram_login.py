"""Interactive Telegram login for the Telegram message source."""

from __future__ import annotations

import logging
import os
from getpass import getpass

import qrcode
from telethon import TelegramClient, errors

LOGGER = logging.getLogger(__name__)


def _print_qr(url: str) -> None:
    qr = qrcode.QRCode(border=1)
    qr.add_data(url)
    qr.make(fit=True)
    qr.print_ascii(invert=True)


def _resolve_2fa_password() -> str:
    return os.getenv("2FA") or getpass("2FA password: ")


async def _login_with_qr(client: TelegramClient) -> None:
    qr = await client.qr_login()
    print("Scan this code in Telegram > Settings > Devices:")
    _print_qr(qr.url)
    await qr.wait(timeout=120)


async def _login_with_phone(client: TelegramClient) -> None:
    phone = os.getenv("PHONE") or input("Phone number (international format): ").strip()
    await client.send_code_request(phone)
    code = input("Login code: ").strip()
    await client.sign_in(phone=phone, code=code)


def login_method() -> str:
    """LOGIN_METHOD from the environment, else ask once."""

    method = (os.getenv("LOGIN_METHOD") or "").strip().lower()
    if method in {"qr", "phone"}:
        return method
    choice = input("Login with [1] QR code or [2] phone code? ").strip()
    return "phone" if choice == "2" else "qr"


async def authorize(client: TelegramClient) -> None:
    """Sign in unless the stored session is still authorized."""

    if await client.is_user_authorized():
        return

    method = login_method()
    try:
        if method == "phone":
            await _login_with_phone(client)
        else:
            await _login_with_qr(client)
    except errors.SessionPasswordNeededError:
        await client.sign_in(password=_resolve_2fa_password())

    me = await client.get_me()
    LOGGER.info("Logged in to Telegram as %s", getattr(me, "first_name", "?"))
