"""
异常定义模块
业务层统一使用的异常类型，由 API 层映射为 HTTP 响应
"""


class DiaryAppError(Exception):
    """应用异常基类"""
    
    status_code = 500
    default_msg = "服务器内部错误"
    
    def __init__(self, msg: str = None):
        self.msg = msg or self.default_msg
        super().__init__(self.msg)


class NetworkFailure(DiaryAppError):
    """数据存储不可达、请求超时或返回非2xx状态"""
    
    status_code = 502
    default_msg = "数据服务暂时不可用，请稍后重试"
    
    def __init__(self, msg: str = None, upstream_status: int = None):
        super().__init__(msg)
        self.upstream_status = upstream_status


class NotFound(DiaryAppError):
    """引用的日记、评论或用户不存在"""
    
    status_code = 404
    default_msg = "资源不存在"


class PermissionDenied(DiaryAppError):
    """已登录但没有操作权限"""
    
    status_code = 403
    default_msg = "没有权限执行此操作"


class AuthenticationRequired(DiaryAppError):
    """操作需要登录"""
    
    status_code = 401
    default_msg = "请先登录"


class AuthenticationFailed(DiaryAppError):
    """用户名密码错误或令牌无效"""
    
    status_code = 401
    default_msg = "用户名或密码错误"


class ValidationFailure(DiaryAppError):
    """输入数据不合法"""
    
    status_code = 400
    default_msg = "输入数据不合法"


class OperationPending(DiaryAppError):
    """同一操作仍在处理中"""
    
    status_code = 409
    default_msg = "点赞操作处理中，请稍候"
