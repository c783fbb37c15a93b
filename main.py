import asyncio
import logging
import sys

from colorama import init, Fore, Style

import config
from digest import (
    CandidateCollector,
    Deduplicator,
    DexScreenerAPI,
    DigestAlert,
    DigestCycle,
    DigestScheduler,
    RankingEngine,
)
from telegram_notifier import TelegramNotifier

init(autoreset=True)

logger = logging.getLogger("digest.main")


def setup_logging(level: str = None):
    logging.basicConfig(
        level=getattr(logging, (level or config.LOG_LEVEL), logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


def print_banner(settings, interval_seconds: float):
    print(f"\n{Fore.CYAN}{'='*50}")
    print(f"{Fore.GREEN}🚀 DEX Digest Bot")
    print(f"{Fore.CYAN}📡 Chain: {settings.chain.upper()}")
    print(f"{Fore.CYAN}⏱️  Interval: every {interval_seconds / 60:g} min")
    print(f"{Fore.YELLOW}Top N: {Fore.WHITE}{settings.top_n}")
    print(f"{Fore.YELLOW}Established: {Fore.WHITE}liq >= ${settings.min_liquidity_established:,.0f}, "
          f"mcap ${settings.min_market_cap:,.0f} - ${settings.max_market_cap_established:,.0f}")
    print(f"{Fore.YELLOW}New launches: {Fore.WHITE}<= {settings.max_age_new_hours:g}h, "
          f"liq >= ${settings.min_liquidity_new:,.0f}, mcap >= ${settings.min_market_cap:,.0f}")
    print(f"{Fore.CYAN}{'='*50}{Style.RESET_ALL}\n")


def log_shutdown_stats(scheduler: DigestScheduler, api: DexScreenerAPI, notifier: TelegramNotifier):
    scheduler_stats = scheduler.get_stats()
    api_stats = api.get_stats()
    delivery_stats = notifier.get_stats()
    logger.info(f"[SHUTDOWN] Scheduler: {scheduler_stats}")
    logger.info(f"[SHUTDOWN] DexScreener: {api_stats}")
    logger.info(f"[SHUTDOWN] Telegram: {delivery_stats}")
    print(f"{Fore.CYAN}📊 Ticks: {scheduler_stats['ticks_run']} run, {scheduler_stats['ticks_skipped']} skipped | "
          f"Requests: {api_stats['request_count']} ({api_stats['failure_count']} failed) | "
          f"Messages: {delivery_stats['sent']} sent, {delivery_stats['fallback_sent']} plain, "
          f"{delivery_stats['failed']} failed")


def build_cycle(settings, notifier: TelegramNotifier, api: DexScreenerAPI) -> DigestCycle:
    collector = CandidateCollector(api, settings)
    return DigestCycle(
        collector=collector,
        deduplicator=Deduplicator(),
        engine=RankingEngine(settings),
        renderer=DigestAlert(chain=settings.chain),
        notifier=notifier,
        settings=settings,
    )


async def main() -> int:
    setup_logging()

    try:
        settings = config.get_settings()
        interval_seconds = config.get_alert_interval_seconds()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"{Fore.RED}❌ Invalid configuration: {e}")
        return 1

    if not config.has_telegram_credentials():
        logger.error("TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID must be set")
        print(f"{Fore.RED}❌ Telegram credentials not configured. Set TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID.")
        return 1

    print_banner(settings, interval_seconds)

    notifier = TelegramNotifier()
    api = DexScreenerAPI({
        'base_url': settings.base_url,
        'search_path': settings.search_path,
        'detail_path': settings.detail_path,
        'request_timeout_seconds': settings.request_timeout_seconds,
    })
    cycle = build_cycle(settings, notifier, api)
    scheduler = DigestScheduler(interval_seconds)

    try:
        await scheduler.run(cycle.run_cycle)
    except asyncio.CancelledError:
        print(f"\n{Fore.YELLOW}Digest stopped.")
    finally:
        scheduler.stop()
        log_shutdown_stats(scheduler, api, notifier)
        print(f"{Fore.CYAN}🌐 Closing connections...")
        await api.close()
        await notifier.close()

    return 0


def run():
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print(f"\n{Fore.YELLOW}Digest stopped.")


if __name__ == "__main__":
    run()
