"""
信息费计费表

按年级档位和每周上课次数给出收取的课时数，信息费 = 课时数 × 课时单价。
这是业务定价规则，不是公式推导出来的。
次数超过表中最大值时按最大值计。
"""

TIER_HIGH = 'high'            # 高中
TIER_MIDDLE = 'middle'        # 初中
TIER_ELEMENTARY = 'elementary'  # 小学及其他

# 年级标签中包含这些字时归入对应档位，按顺序匹配
TIER_KEYWORDS = (
    ('高', TIER_HIGH),
    ('初', TIER_MIDDLE),
)

FEE_HOURS_TABLE = {
    TIER_HIGH: {1: 3, 2: 3.5, 3: 4, 4: 5.5},
    TIER_MIDDLE: {1: 3, 2: 4, 3: 5, 4: 6, 5: 7},
    TIER_ELEMENTARY: {1: 3, 2: 4, 3: 5, 4: 6, 5: 7, 6: 8},
}

MIN_FREQUENCY = 1
MAX_FREQUENCY = 7
