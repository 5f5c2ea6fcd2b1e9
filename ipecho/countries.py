"""ISO 3166-1 alpha-2 codes to Simplified Chinese country names.

Only the names shown to callers are listed; codes missing here are displayed
as the raw code.
"""

from types import MappingProxyType

COUNTRY_NAMES_ZH: MappingProxyType[str, str] = MappingProxyType(
    {
        "AE": "阿联酋",
        "AR": "阿根廷",
        "AT": "奥地利",
        "AU": "澳大利亚",
        "BD": "孟加拉国",
        "BE": "比利时",
        "BG": "保加利亚",
        "BR": "巴西",
        "CA": "加拿大",
        "CH": "瑞士",
        "CL": "智利",
        "CN": "中国",
        "CO": "哥伦比亚",
        "CZ": "捷克",
        "DE": "德国",
        "DK": "丹麦",
        "EG": "埃及",
        "ES": "西班牙",
        "FI": "芬兰",
        "FR": "法国",
        "GB": "英国",
        "GR": "希腊",
        "HK": "中国香港",
        "HU": "匈牙利",
        "ID": "印度尼西亚",
        "IE": "爱尔兰",
        "IL": "以色列",
        "IN": "印度",
        "IR": "伊朗",
        "IS": "冰岛",
        "IT": "意大利",
        "JP": "日本",
        "KE": "肯尼亚",
        "KH": "柬埔寨",
        "KR": "韩国",
        "KZ": "哈萨克斯坦",
        "LA": "老挝",
        "LU": "卢森堡",
        "MM": "缅甸",
        "MN": "蒙古",
        "MO": "中国澳门",
        "MX": "墨西哥",
        "MY": "马来西亚",
        "NG": "尼日利亚",
        "NL": "荷兰",
        "NO": "挪威",
        "NP": "尼泊尔",
        "NZ": "新西兰",
        "PE": "秘鲁",
        "PH": "菲律宾",
        "PK": "巴基斯坦",
        "PL": "波兰",
        "PT": "葡萄牙",
        "RO": "罗马尼亚",
        "RU": "俄罗斯",
        "SA": "沙特阿拉伯",
        "SE": "瑞典",
        "SG": "新加坡",
        "TH": "泰国",
        "TR": "土耳其",
        "TW": "中国台湾",
        "UA": "乌克兰",
        "US": "美国",
        "VN": "越南",
        "ZA": "南非",
    }
)
