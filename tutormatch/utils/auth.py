# tutormatch/utils/auth.py
from functools import wraps
from flask import request, g, current_app
from flask_jwt_extended import verify_jwt_in_request, get_jwt, get_jwt_identity
from tutormatch.utils.response import APIResponse

def role_required(*roles, optional=False):
    """
    验证访问令牌中的角色

    通过后 g.role 为角色，g.actor 为身份（家长/学生为手机号）。
    optional=True 时没有令牌也放行，此时 g.role 为 None。
    """
    allowed = {getattr(r, 'value', r) for r in roles}

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request(optional=optional)
            identity = get_jwt_identity()
            if identity is None:
                g.role = None
                g.actor = None
                return fn(*args, **kwargs)

            role = get_jwt().get('role')
            if role not in allowed:
                current_app.logger.warning(f"权限验证失败：{role} 访问 {request.path}")
                return APIResponse.error("权限不足", code=403)

            g.role = role
            g.actor = identity
            # 用于日志
            request.actor = f"{role}:{identity}"
            return fn(*args, **kwargs)
        return wrapper
    return decorator
