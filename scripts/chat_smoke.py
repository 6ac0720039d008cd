#!/usr/bin/env python
"""Script de diagnóstico do fluxo de chat.

Testa, contra o backend de referência em memória (sem rede):
1. Negociação de sessão com tutor aberto
2. Senha errada e senha correta em tutor protegido
3. Envio otimista e confirmação do par user/assistant
4. Resync (poll_once) preservando o histórico

Uso:
    python scripts/chat_smoke.py
"""

import asyncio
import sys
from pathlib import Path

# Adicionar src ao path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

import httpx

from brainmate_chat.api.app import create_app
from brainmate_chat.application.chat_session import create_chat_session
from brainmate_chat.application.send_coordinator import SendOutcome
from brainmate_chat.config.settings import Settings
from brainmate_chat.domain.session import NegotiationState

OPEN_TUTOR_ID = 1
GATED_TUTOR_ID = 2
DEMO_PASSWORD = "letmein"


def _session(app, settings, tutor_id):
    return create_chat_session(
        tutor_id, settings=settings, transport=httpx.ASGITransport(app=app)
    )


async def check_open_tutor(app, settings):
    """Sessão com tutor aberto, envio e resync."""
    async with _session(app, settings, OPEN_TUTOR_ID) as chat:
        state = await chat.open()
        print(f"  - Estado: {state}")
        if state != NegotiationState.ACTIVE:
            print("❌ ERRO: Sessão não ficou ativa")
            return False

        outcome = await chat.send("What is photosynthesis?")
        print(f"  - Envio: {outcome}")
        if outcome != SendOutcome.CONFIRMED:
            print("❌ ERRO: Mensagem não confirmada")
            return False

        for message in chat.messages:
            print(f"  - [{message.role}] {message.content[:60]}")

        await chat.poller.poll_once()
        if len(chat.messages) != 2:
            print(f"⚠️  ATENÇÃO: Resync alterou o histórico ({len(chat.messages)} mensagens)")
            return False

    print("✅ Tutor aberto OK")
    return True


async def check_gated_tutor(app, settings):
    """Senha errada mantém o prompt; senha correta ativa a sessão."""
    async with _session(app, settings, GATED_TUTOR_ID) as chat:
        state = await chat.open()
        print(f"  - Estado inicial: {state}")

        state = await chat.submit_password("wrong")
        latest = chat.notices.latest
        print(f"  - Senha errada: {state} ({latest.title if latest else '-'})")
        if state != NegotiationState.AWAITING_PASSWORD:
            print("❌ ERRO: Senha errada não manteve o prompt")
            return False

        state = await chat.submit_password(DEMO_PASSWORD)
        print(f"  - Senha correta: {state}")
        if state != NegotiationState.ACTIVE:
            print("❌ ERRO: Senha correta não ativou a sessão")
            return False

    print("✅ Tutor protegido OK")
    return True


async def main():
    """Executa bateria de testes diagnósticos."""
    print("🔍 DIAGNÓSTICO DO FLUXO DE CHAT\n")
    print("=" * 60)

    settings = Settings(api_base_url="http://smoke/api", log_format="text", log_level="WARNING")
    app = create_app(settings, seed_demo=True)

    print("\n1️⃣  Testando tutor aberto...")
    if not await check_open_tutor(app, settings):
        print("\n❌ FALHA CRÍTICA: fluxo com tutor aberto")
        return 1

    print("\n2️⃣  Testando tutor protegido por senha...")
    if not await check_gated_tutor(app, settings):
        print("\n❌ FALHA CRÍTICA: fluxo com senha")
        return 1

    print("\n" + "=" * 60)
    print("\n✅ TODOS OS TESTES PASSARAM")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
