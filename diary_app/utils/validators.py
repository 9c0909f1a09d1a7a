"""
输入校验模块
注册和登录表单的用户名、邮箱、密码校验规则
"""

import re

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{3,20}$")
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
MIN_PASSWORD_LENGTH = 6


def validate_username(value: str) -> bool:
    """用户名只允许字母、数字、下划线和连字符，长度3-20"""
    return bool(value) and USERNAME_PATTERN.match(value) is not None


def validate_email(value: str) -> bool:
    """
    校验邮箱格式
    
    除基本正则外还要求：
    - 本地部分（@之前）至少2个字符
    - 域名包含点号，域名主体和后缀都至少2个字符
    - 后缀不能全是数字
    
    Args:
        value: 邮箱地址
        
    Returns:
        是否合法
    """
    if not value or not EMAIL_PATTERN.match(value):
        return False
    
    parts = value.split("@")
    if len(parts) != 2:
        return False
    
    local_part, domain_part = parts
    if len(local_part) < 2:
        return False
    
    domain_parts = domain_part.split(".")
    if len(domain_parts) < 2:
        return False
    
    domain_name = domain_parts[0]
    extension = domain_parts[-1]
    if len(domain_name) < 2 or len(extension) < 2:
        return False
    
    if extension.isdigit():
        return False
    
    return True


def validate_password(value: str) -> bool:
    """密码至少6位且不能全是空白"""
    return bool(value) and len(value) >= MIN_PASSWORD_LENGTH and len(value.strip()) > 0
