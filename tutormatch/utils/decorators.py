import traceback
from functools import wraps
from flask import current_app, request
from tutormatch.core.errors import TutorMatchError
from tutormatch.extensions import db
from tutormatch.utils.response import APIResponse

def api_error_handler(f):
    """
    接口异常统一转换

    业务异常按自带的状态码返回（服务层已记录日志）；
    其他异常回滚当前会话，记录堆栈后返回 500。
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except TutorMatchError as e:
            return APIResponse.from_exception(e)
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"接口异常 {request.method} {request.path}: {e}", exc_info=True)
            # 堆栈只在调试模式下返回给调用方
            details = traceback.format_exc() if current_app.config.get('DEBUG', False) else None
            return APIResponse.error(message=f"服务异常: {e}", errors=details, code=500)
    return decorated
