# src/blockci/__init__.py
"""
blockci — compilação e execução de pipelines CI/CD montados por blocos.

Este pacote raiz define o namespace público do blockci, uma biblioteca
que transforma definições de pipeline em especificações de build
consumidas por um serviço de build gerenciado e que executa grafos de
estágios (build → deploy) contra capacidades externas.

Princípios centrais:
    - A compilação é pura, determinística e sem I/O
    - A execução é sequencial, fail-fast e auditável
    - Serviços externos são colaboradores com contratos estreitos
    - Nenhuma decisão silenciosa sem registro explícito

Arquitetura em alto nível:
    - compiler          → blocos → buildspec (YAML)
    - core.config       → carregamento, merge e hashing de configuração
    - core.pipeline     → tipos, contexto de execução e validação
    - core.engine       → planejamento (DAG) e execução de nós
    - core.traceability → Execution Record e Event Log
    - integrations      → retry, gatilhos de build/deploy e registros de build
    - persistence       → store de documentos por id

Limites explícitos:
    - Não implementa autenticação nem camada HTTP
    - Não recupera nem transmite logs de build
    - Não fala diretamente com AWS (gatilhos são injetados)
"""
from .compiler import compile_pipeline, render_buildspec
from .core.engine import PipelineExecutor, RunResult

__version__ = "0.1.0"

__all__ = [
    "compile_pipeline",
    "render_buildspec",
    "PipelineExecutor",
    "RunResult",
    "__version__",
]
