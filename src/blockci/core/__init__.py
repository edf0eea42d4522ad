# src/blockci/core/__init__.py
"""
Core do blockci.

Este pacote reúne as responsabilidades de planejamento, execução e
rastreabilidade de pipelines, independentes de adapters externos.

Componentes principais:
    - config       → resolução de configuração (merge, validação estrutural, hashing)
    - pipeline     → tipos canônicos, contexto de execução, registry e validação
    - engine       → ordenação topológica e execução fail-fast de nós
    - traceability → Execution Record com estado por nó e Event Log

Princípios fundamentais:
    - Nenhuma decisão silenciosa: todo comportamento é explícito e testado
    - Separação estrita de responsabilidades entre camadas
    - Colaboradores externos entram apenas por injeção

Limites explícitos:
    - Não fala com serviços de build ou deploy diretamente
    - Não gera buildspec (responsabilidade de `blockci.compiler`)
"""
