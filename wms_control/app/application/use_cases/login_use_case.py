from wms_control.app.application.auth_controller import AuthController
from wms_control.app.application.use_cases.result import UseCaseResult
from wms_control.app.local_mirror import LocalMirror
from wms_control.app.ui.forms import validate_login_form

SAVED_IDENTIFIER_KEY = "saved_user_id"


class LoginUseCase:
    def __init__(self, auth: AuthController, mirror: LocalMirror | None = None) -> None:
        self.auth = auth
        self.mirror = mirror

    def saved_identifier(self) -> str | None:
        if self.mirror is None:
            return None
        value = self.mirror.read(SAVED_IDENTIFIER_KEY)
        return value if isinstance(value, str) else None

    def execute(self, email: str, password: str, remember_identifier: bool = False) -> UseCaseResult:
        form = validate_login_form(email, password)
        if not form.is_valid:
            return UseCaseResult.invalid(form.field_errors)
        if self.mirror is not None:
            if remember_identifier:
                self.mirror.write(SAVED_IDENTIFIER_KEY, form.values["email"])
            else:
                self.mirror.remove(SAVED_IDENTIFIER_KEY)
        if not self.auth.login(form.values["email"], form.values["password"]):
            return UseCaseResult(success=False, code="INVALID_CREDENTIALS", message="Email or password is incorrect.")
        return UseCaseResult(success=True, message="Signed in.")
