from flask import current_app
from flask_smorest import Blueprint
from datetime import datetime
import os

from tutormatch.api.schemas import HealthSchema
from tutormatch.services.sync.schema_probe import get_capabilities
from tutormatch.services.sync.store import check_connection
from tutormatch.utils.response import APIResponse
from tutormatch.utils.decorators import api_error_handler

# 创建蓝图
health_bp = Blueprint(
    'health',
    'health',
    description='健康检查接口',
)

@health_bp.route('/check', methods=['GET'])
@health_bp.response(200, HealthSchema)
@api_error_handler
def health_check():
    """
    健康检查接口

    返回服务器状态、版本、时间和数据库连接情况
    """
    check_connection()
    health_data = {
        "status": "online",
        "version": current_app.config.get('API_VERSION', 'v1'),
        "timestamp": datetime.now().isoformat(),
        "environment": os.environ.get('FLASK_ENV', 'development'),
        "database": "connected",
        "job_status_column": get_capabilities().job_status,
    }
    return APIResponse.success(
        data=health_data,
        message="服务器运行正常"
    )
