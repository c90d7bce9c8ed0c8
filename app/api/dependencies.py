from fastapi import Request

from app.config.settings import Settings
from app.dashboard.session import ReceiptSession
from app.proxy.dify_client import DifyClient


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_dify_client(request: Request) -> DifyClient:
    return request.app.state.dify_client


def get_session(request: Request) -> ReceiptSession:
    return request.app.state.session
