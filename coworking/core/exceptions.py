"""
@description 业务异常定义
@responsibility 定义服务层抛出的类型化异常，由接口层统一转换为响应
"""


class CoworkingError(Exception):
    """业务异常基类，未细分的错误按服务器内部错误处理"""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(CoworkingError):
    """引用的实体不存在"""

    status_code = 404


class InvalidArgumentError(CoworkingError):
    """调用方输入不合法（日期范围错误、办公室最少天数不足等）"""

    status_code = 400


class AlreadyExistsError(CoworkingError):
    """资源冲突（名称重复、时间段已被占用、容量已满等）"""

    status_code = 409
