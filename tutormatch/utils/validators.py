import re

PHONE_PATTERN = re.compile(r'^\d{11}$')


def validate_phone(phone):
    """验证手机号码格式：11位数字"""
    if not phone:
        return False
    return bool(PHONE_PATTERN.match(phone))


def split_tokens(text):
    """把逗号、顿号或空白分隔的字符串拆成去空的列表"""
    if not text:
        return []
    return [t for t in re.split(r'[,，、\s]+', text) if t]
