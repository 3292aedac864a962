import re
from typing import NamedTuple

from tutormatch.core.pricing.fee_tables import (
    FEE_HOURS_TABLE, TIER_KEYWORDS, TIER_ELEMENTARY, MIN_FREQUENCY,
)

PRICE_FORMAT_ERROR = '价格格式错误'

_NON_NUMERIC = re.compile(r'[^\d.]')
_LEADING_NUMBER = re.compile(r'\d+(?:\.\d+)?|\.\d+')


class FeeQuote(NamedTuple):
    hours: float
    amount: float
    note: str

    def to_dict(self):
        return {'hours': self.hours, 'amount': self.amount, 'note': self.note}


def parse_hourly_price(price_text):
    """
    从展示用的价格文本中取出课时单价

    去掉数字和小数点以外的字符后取开头的数字，例如 "¥100/小时" -> 100.0。
    取不到数字时返回 None。
    """
    if not price_text:
        return None
    match = _LEADING_NUMBER.match(_NON_NUMERIC.sub('', str(price_text)))
    if not match:
        return None
    return float(match.group())


def grade_tier(grade_label):
    label = grade_label or ''
    for keyword, tier in TIER_KEYWORDS:
        if keyword in label:
            return tier
    return TIER_ELEMENTARY


def billable_hours(grade_label, weekly_frequency):
    table = FEE_HOURS_TABLE[grade_tier(grade_label)]
    freq = weekly_frequency or MIN_FREQUENCY
    freq = max(MIN_FREQUENCY, min(int(freq), max(table)))
    return table[freq]


def compute_fee(grade_label, weekly_frequency, hourly_price_text):
    """
    计算学生需要支付的信息费

    :param grade_label: 年级，如 "初二"、"高三"
    :param weekly_frequency: 每周上课次数
    :param hourly_price_text: 价格文本，如 "¥100/小时"
    :return: FeeQuote(hours, amount, note)，价格无法解析时 hours 与 amount 都为 0
    """
    price = parse_hourly_price(hourly_price_text)
    if price is None:
        return FeeQuote(0, 0, PRICE_FORMAT_ERROR)

    # 缺省或小于 1 的次数按每周 1 次计，说明文字与计费一致
    freq = max(MIN_FREQUENCY, int(weekly_frequency or MIN_FREQUENCY))
    hours = billable_hours(grade_label, freq)
    return FeeQuote(hours, hours * price, f"{grade_label or ''} - 每周{freq}次")


def fee_for_job(job):
    """对 Job 模型或同结构字典计算信息费"""
    if isinstance(job, dict):
        return compute_fee(job.get('grade'), job.get('frequency'), job.get('price'))
    return compute_fee(job.grade, job.frequency, job.price)
