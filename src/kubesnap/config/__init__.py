from .settings import Settings, KubernetesSettings, ExtractionSettings, LogLevel, LogFormat

__all__ = ["Settings", "KubernetesSettings", "ExtractionSettings", "LogLevel", "LogFormat"]
