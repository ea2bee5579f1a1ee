"""User-facing messages for auth failures, one table per operation.

Keys are the gateway's ``auth/...`` error codes.  Codes missing from a table
fall back to that table's default message.
"""

from typing import Optional

NETWORK_ERROR = "Erro de conexão. Verifique sua internet e tente novamente."
TOO_MANY_REQUESTS = "Muitas tentativas sem sucesso. Tente novamente mais tarde."
INVALID_EMAIL = "O endereço de e-mail não é válido."

LOGIN_DEFAULT = "Ocorreu um erro ao fazer login. Tente novamente."
LOGIN_ERROR_MESSAGES = {
    "auth/invalid-credential": "Credenciais inválidas. Verifique seu e-mail e senha.",
    "auth/invalid-email": INVALID_EMAIL,
    "auth/user-disabled": "Esta conta foi desativada.",
    "auth/user-not-found": "Não existe usuário com este e-mail.",
    "auth/wrong-password": "Senha incorreta.",
    "auth/too-many-requests": TOO_MANY_REQUESTS,
    "auth/network-request-failed": NETWORK_ERROR,
}

REGISTER_DEFAULT = "Ocorreu um erro ao criar sua conta. Tente novamente."
REGISTER_ERROR_MESSAGES = {
    "auth/email-already-in-use": (
        "Este e-mail já está sendo usado. Por favor, use outro e-mail ou tente fazer login."
    ),
    "auth/invalid-email": INVALID_EMAIL,
    "auth/weak-password": "A senha é muito fraca. Por favor, use uma senha mais forte.",
    "auth/network-request-failed": NETWORK_ERROR,
    "auth/too-many-requests": TOO_MANY_REQUESTS,
    "auth/operation-not-allowed": "O cadastro com e-mail e senha não está habilitado.",
}

LOGOUT_DEFAULT = "Ocorreu um erro ao sair. Tente novamente."
LOGOUT_ERROR_MESSAGES = {
    "auth/network-request-failed": NETWORK_ERROR,
    "auth/too-many-requests": TOO_MANY_REQUESTS,
}

DUPLICATE_REVIEW = "Você já escreveu uma resenha para este livro."


def auth_error_message(exc: BaseException, table: dict[str, str], default: str) -> str:
    """Look up the message for ``exc`` by its ``code`` attribute, if any."""
    code: Optional[str] = getattr(exc, "code", None)
    if not isinstance(code, str):
        return default
    return table.get(code, default)
