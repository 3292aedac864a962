"""业务异常

服务层只抛出这里定义的异常，接口层统一转换为标准响应。
"""


class TutorMatchError(Exception):
    """所有业务异常的基类"""
    code = 400

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class BusinessRuleError(TutorMatchError):
    """违反业务规则，不会产生任何写入"""
    code = 400


class PermissionDenied(TutorMatchError):
    code = 403


class NotFound(TutorMatchError):
    code = 404


class InvalidTransition(TutorMatchError):
    """状态流转不在定义的流转表中"""
    code = 409


class StoreWriteError(TutorMatchError):
    """写入数据库失败，message 中保留数据库的原始错误信息"""
    code = 500


class StoreUnavailable(TutorMatchError):
    """数据库未配置或无法连接"""
    code = 503
