"""档案更新流水线的异常定义"""


class ProfilePipelineError(Exception):
    """流水线致命错误的基类，调用方只会收到一条通用错误信息"""


class EmptyCompletionError(ProfilePipelineError):
    """模型输出缺失或为空，无法恢复出任何展示文本"""


class LLMCallError(ProfilePipelineError):
    """调用模型失败（网络、鉴权等），本次请求不会写入任何档案变更"""
