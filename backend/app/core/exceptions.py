# 커스텀 예외 클래스 정의
# 주니어 개발자님께: Python에서는 표준 예외(Exception)를 상속받아
# 프로젝트에 특화된 예외를 만들 수 있습니다.
# 서비스 레이어는 HTTP 상태 코드를 가진 예외를 raise 하고,
# core/error_handlers.py 의 핸들러가 한 곳에서 JSON 응답으로 바꿔줍니다.


class AppError(Exception):
    """API 도메인 예외의 기본 클래스

    Attributes:
        status_code: 응답에 사용할 HTTP 상태 코드
        message: 클라이언트에게 그대로 노출되는 에러 메시지
    """
    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: str = None, status_code: int = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class BadRequestError(AppError):
    """잘못된 입력 (400)"""
    status_code = 400
    default_message = "Bad Request"


class UnauthorizedError(AppError):
    """세션 없음/만료/위조, 또는 잘못된 자격 증명 (401)"""
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    """로그인은 되어 있지만 리소스 소유자가 아님 (403)"""
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not Found"


class ConflictError(AppError):
    """username/email 중복 (409)"""
    status_code = 409
    default_message = "Conflict"


class InternalServerError(AppError):
    status_code = 500
    default_message = "Internal Server Error"
