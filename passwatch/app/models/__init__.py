from passwatch.app.models.user import User
from passwatch.app.models.credential import Credential
from passwatch.app.models.login_ip import LoginIp
from passwatch.app.models.password_log import PasswordLog, ActionType

__all__ = ["User", "Credential", "LoginIp", "PasswordLog", "ActionType"]
