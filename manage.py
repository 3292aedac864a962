import os
import click
from flask.cli import FlaskGroup
from tutormatch import create_app
from tutormatch.extensions import db

def _create_app():
    return create_app(os.getenv('FLASK_CONFIG') or 'default')

cli = FlaskGroup(create_app=_create_app)

@cli.command('create_db')
def create_db():
    """创建数据库表"""
    db.create_all()
    click.echo('数据库表已创建')

@cli.command('migrate-legacy-orders')
def migrate_legacy_orders():
    """把旧版两段式审核的订单状态迁移到当前流程"""
    from tutormatch.services.order.order_service import OrderService
    count = OrderService.migrate_legacy_orders()
    click.echo(f'已迁移 {count} 条订单')

@cli.command('probe-schema')
def probe_schema():
    """检查 jobs 表结构，显示是否处于 is_active 兼容模式"""
    from tutormatch.services.sync.schema_probe import probe_schema as probe
    caps = probe(db.engine)
    if caps.job_status:
        click.echo('jobs.status 列存在，使用完整状态流程')
    else:
        click.echo('jobs 表缺少 status 列，使用 is_active 兼容模式')

if __name__ == '__main__':
    cli()
