from flask import jsonify

class APIResponse:
    """
    统一的接口响应：{success, message, code, data|errors}
    """
    @staticmethod
    def _build(success, message, code, key=None, payload=None):
        body = {"success": success, "message": message, "code": code}
        if payload is not None:
            body[key] = payload
        return jsonify(body), code

    @staticmethod
    def success(data=None, message="操作成功", code=200):
        """
        :param data: 业务数据，为 None 时不返回 data 字段
        :return: (JSON响应, 状态码)
        """
        return APIResponse._build(True, message, code, "data", data)

    @staticmethod
    def error(message="操作失败", errors=None, code=400):
        return APIResponse._build(False, message, code, "errors", errors)

    @staticmethod
    def from_exception(exc):
        """业务异常 -> 错误响应，状态码取异常自带的 code"""
        return APIResponse.error(message=exc.message, errors=exc.details, code=exc.code)
