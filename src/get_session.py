"""Interactive Telegram login for the namewatch account."""

import asyncio
import logging
import os
from getpass import getpass

import qrcode
from dotenv import load_dotenv
from telethon import TelegramClient, errors

from client import build_client

LOGGER = logging.getLogger(__name__)


def _print_qr(url: str) -> None:
    qr = qrcode.QRCode(border=1)
    qr.add_data(url)
    qr.make(fit=True)
    qr.print_ascii(invert=True)


def _resolve_2fa_password() -> str:
    password = os.getenv("2FA")
    if password:
        return password
    return getpass("2FA password: ")


async def _authorize_with_qr(client: TelegramClient) -> None:
    qr = await client.qr_login()
    _print_qr(qr.url)
    await qr.wait(timeout=120)


async def _authorize_with_phone(client: TelegramClient) -> None:
    phone = os.getenv("PHONE") or input("Phone number (international format): ").strip()
    await client.send_code_request(phone)
    code = input("Login code: ").strip()
    await client.sign_in(phone=phone, code=code)


def _pick_login_method() -> str:
    method = (os.getenv("LOGIN_METHOD") or "").strip().lower()
    if method in {"qr", "phone"}:
        return method
    options = {"1": "qr", "2": "phone"}
    while True:
        print("\nLogin methods:\n[1] QR code\n[2] Phone code\n[3] Exit\n")
        choice = input("namewatch > ").strip()
        if choice == "3":
            raise SystemExit(0)
        if choice in options:
            return options[choice]
        print("Invalid option. Please choose 1, 2, or 3.")


async def authorize(client: TelegramClient) -> None:
    """Log the account in unless the session file is already authorized."""

    if await client.is_user_authorized():
        return

    load_dotenv()
    try:
        if _pick_login_method() == "phone":
            await _authorize_with_phone(client)
        else:
            await _authorize_with_qr(client)
    except errors.SessionPasswordNeededError:
        await client.sign_in(password=_resolve_2fa_password())


async def login(client: TelegramClient) -> None:
    """Connect, authorize and report which account the session belongs to."""

    await client.connect()
    try:
        await authorize(client)
        me = await client.get_me()
        LOGGER.info("Logged in as %s (id=%s)", me.first_name, me.id)
        print(f"Logged in as: {me.first_name} (id={me.id})")
    finally:
        await client.disconnect()


if __name__ == "__main__":
    asyncio.run(login(build_client()))
