"""LLM 工厂模块

根据配置文件创建 LangChain 聊天模型实例。
只从系统环境变量获取密钥，配置文件里只记录环境变量名。
"""

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "llm_config.json"


def _build_gemini(api_key: str, model_config: Dict[str, Any]) -> BaseChatModel:
    return ChatGoogleGenerativeAI(
        google_api_key=api_key,
        model=model_config["model_name"],
        temperature=model_config.get("temperature", 0.7)
    )


def _build_openai_compatible(api_key: str, model_config: Dict[str, Any]) -> BaseChatModel:
    # Moonshot 等服务商使用 OpenAI 兼容接口
    return ChatOpenAI(
        api_key=api_key,
        base_url=model_config.get("base_url"),
        model=model_config["model_name"],
        temperature=model_config.get("temperature", 0.7)
    )


PROVIDER_BUILDERS: Dict[str, Callable[[str, Dict[str, Any]], BaseChatModel]] = {
    "gemini": _build_gemini,
    "moonshot": _build_openai_compatible,
    "openai_official": _build_openai_compatible,
}


class LLMFactory:
    """LLM 工厂类，负责读取配置并创建模型实例"""

    def __init__(self, config_path: Optional[str] = None, config: Optional[Dict[str, Any]] = None):
        """
        Args:
            config_path: 配置文件路径；None 时依次使用 LLM_CONFIG_PATH 环境变量和 backend/llm_config.json
            config: 直接传入的配置字典，优先于配置文件
        """
        self.config_path = config_path or os.environ.get("LLM_CONFIG_PATH") or str(DEFAULT_CONFIG_PATH)
        self._loaded_config = config

    def _load_config(self) -> Dict[str, Any]:
        """加载配置文件

        Raises:
            FileNotFoundError: 配置文件不存在
            json.JSONDecodeError: JSON 格式错误
        """
        if self._loaded_config is None:
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    self._loaded_config = json.load(f)
            except FileNotFoundError:
                raise FileNotFoundError(f"配置文件不存在: {self.config_path}")
        return self._loaded_config

    @property
    def active_model(self) -> str:
        active_model = self._load_config().get("active_model")
        if not active_model:
            raise ValueError("配置文件中缺少 active_model 字段")
        return active_model

    def get_active_model_config(self) -> Dict[str, Any]:
        """获取当前激活的模型配置

        Raises:
            ValueError: active_model 缺失或对应的 provider 配置不存在
        """
        providers = self._load_config().get("providers")
        if not providers:
            raise ValueError("配置文件中缺少 providers 字段")

        model_config = providers.get(self.active_model)
        if not model_config:
            raise ValueError(f"providers 中找不到 '{self.active_model}' 的配置")
        if not model_config.get("model_name"):
            raise ValueError("模型配置中缺少 model_name 字段")
        return model_config

    def _get_api_key(self, env_key: str) -> str:
        api_key = os.getenv(env_key)
        if not api_key:
            raise ValueError(f"环境变量 '{env_key}' 未设置或为空，无法初始化 LLM")
        return api_key

    def create_llm(self) -> BaseChatModel:
        """创建并返回 LLM 实例

        Raises:
            ValueError: 配置错误或环境变量缺失
            NotImplementedError: 不支持的模型类型
        """
        model_config = self.get_active_model_config()

        builder = PROVIDER_BUILDERS.get(self.active_model)
        if builder is None:
            raise NotImplementedError(f"不支持的模型类型: {self.active_model}")

        env_key = model_config.get("env_key_map")
        if not env_key:
            raise ValueError("模型配置中缺少 env_key_map 字段")

        return builder(self._get_api_key(env_key), model_config)
