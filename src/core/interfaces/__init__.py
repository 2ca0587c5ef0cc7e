"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan adaptadores concretos.
- Permite invertir dependencias: el Core depende de abstracciones y los tests
  pueden inyectar fakes (contador en memoria, transportes HTTP simulados).
"""
