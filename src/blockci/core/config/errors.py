# src/blockci/core/config/errors.py
"""
Exceções canônicas da camada de configuração do blockci.

As exceções aqui definidas representam violações estruturais da
configuração (arquivo ausente, formato desconhecido, tipos conflitantes,
valores fora do domínio aceito), e não falhas de execução de pipeline.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa erro de compilação ou de execução de nó

Limites explícitos:
    - Não executa pipeline
    - Não realiza fallback ou recovery
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do blockci.

    Permite captura genérica de erros de configuração, separando-os
    claramente de erros de compilação ou de execução.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Exceção levantada quando o arquivo de configuração base (defaults)
    não é encontrado no caminho especificado.

    Decisões arquiteturais:
        - O arquivo de defaults é obrigatório
        - Não há criação implícita de defaults
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando o formato do arquivo de configuração
    não é suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Exceção levantada quando o conteúdo raiz da configuração
    não é um dicionário (`dict`).
    """


class ConfigTypeConflictError(ConfigError):
    """
    Exceção levantada quando ocorre conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"retry": {"max_attempts": 3}}
        - override: {"retry": "off"}

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito
    """


class InvalidSettingError(ConfigError):
    """
    Exceção levantada quando um valor da configuração resolvida não pode
    ser convertido para as settings tipadas do Engine.

    Exemplo:
        - retry.max_attempts = 0
        - build.project_prefix = ""
    """
