"""
订单与学生简历的关联

简历以手机号为主键，和订单之间没有外键，数据库无法直接连接查询。
这里先收集订单上去重后的手机号，一次 IN 查询取回简历，再在内存中合并。
"""
from tutormatch.models.student_profile import StudentProfile


def fetch_profiles_by_phone(phones):
    """按手机号批量读取简历，返回 {phone: StudentProfile}"""
    phones = sorted({p for p in phones if p})
    if not phones:
        return {}
    profiles = StudentProfile.query.filter(StudentProfile.phone.in_(phones)).all()
    return {p.phone: p for p in profiles}


def attach_profiles(order_dicts, phone_key='student_contact'):
    """
    给订单字典补上 profile 字段（左连接语义）

    没有简历的手机号得到 profile=None，不视为错误。
    """
    profiles = fetch_profiles_by_phone(o.get(phone_key) for o in order_dicts)
    for order in order_dicts:
        profile = profiles.get(order.get(phone_key))
        order['profile'] = profile.to_dict() if profile else None
    return order_dicts
