class IriKitError(Exception):
    """基类"""

class ValidationError(IriKitError):
    """查询参数校验失败（坐标越界、未知变量 / 算子）"""

class NotFoundError(IriKitError):
    """文件中缺少所请求的维度 / 变量"""

class FormatError(IriKitError):
    """时间 units / 参考日期无法解析，或偏移量非有限值"""

class AlignmentError(IriKitError):
    """组装表格时各序列长度不一致"""

class FetchError(IriKitError):
    """下载失败（网络、超时、非 2xx 响应）"""
