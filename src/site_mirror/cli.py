"""Command line interface for the site mirror."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from .core.config import load_configuration
from .core.errors import ConfigurationError, UnrecoverableCrawlError
from .mirror.crawler import MirrorCrawler


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Espelha um site renderizado por JavaScript em arquivos estáticos"
    )
    parser.add_argument("-u", "--url", help="URL inicial (padrão: TARGET_URL)")
    parser.add_argument("--max-pages", type=int, help="Limite de páginas renderizadas (padrão: MAX_PAGES ou 100)")
    parser.add_argument(
        "--download-external",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Baixa folhas de estilo, scripts e imagens do mesmo domínio (padrão: DOWNLOAD_EXTERNAL)",
    )
    parser.add_argument("--output", help="Diretório de saída (padrão: OUTPUT_DIR ou dist)")
    parser.add_argument("--report", help="Arquivo JSON com o resumo da execução")
    parser.add_argument("--timeout", type=int, help="Tempo máximo (ms) por navegação")
    parser.add_argument(
        "--headless",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Força execução headless (padrão vem de .env/variáveis de ambiente)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Exibe logs de depuração")
    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_arguments(argv)
    configure_logging(args.verbose)

    try:
        config = load_configuration(
            args.url,
            args.report,
            max_pages=args.max_pages,
            download_external=args.download_external,
            output_dir=args.output,
            navigation_timeout=args.timeout,
            headless=args.headless,
        )
    except ConfigurationError as exc:
        print(f"[!] {exc}", file=sys.stderr)
        return 1

    print(f"[*] Espelhando {config.target_url} em {config.output_dir}")
    print(f"[*] Limite de páginas: {config.max_pages}")
    if config.download_external:
        print("[*] Download de recursos externos habilitado")

    crawler = MirrorCrawler(config)
    try:
        report = crawler.run()
    except UnrecoverableCrawlError as exc:
        print(f"[!] {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("[!] Execução interrompida pelo usuário", file=sys.stderr)
        return 130

    try:
        report.save(config.report_path)
    except OSError as exc:
        print(f"[!] Não foi possível salvar o relatório em {config.report_path}: {exc}", file=sys.stderr)
        return 1
    print(f"[+] Relatório salvo em {config.report_path}")
    print(f"    Páginas renderizadas : {report.pages_rendered}")
    print(f"    Recursos baixados    : {len(report.resources)}")
    print(f"    Falhas               : {len(report.failures)}")
    if report.budget_reached:
        print(f"    Limite atingido, {report.remaining} URL(s) restantes na fila")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    sys.exit(run_cli(argv))


if __name__ == "__main__":
    main()
