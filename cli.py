"""
Yaglama bakim takibi - interaktif komut satiri arayuzu.

Depo yapilandirmasi bulunursa DynamoDB'ye, bulunamazsa yerel JSON deposuna baglanir.
Kullanim:
    python cli.py
"""

import asyncio
import logging
import os
import shlex
import sys
from datetime import date

import env_loader  # noqa: F401

from src.config import LocalOverrideProvider, StoreConfig, build_store, resolve_store_config
from src.models.errors import LubeTrackError, PartialFailureError
from src.services import (
    MaintenanceAdvisor,
    MaintenanceRecordService,
    SettingsService,
    SOPLibrary,
    StockLedger,
)
from src.services.exports import due_tasks_csv, history_report_html, stock_log_csv, write_export
from src.services.schedule import classify_status, status_summary
from src.services.working_set import ChangeListener, WorkingSet
from src.storage import Collection, DynamoDBStore

REGION = os.environ.get("AWS_DEFAULT_REGION", "us-west-2")
LOCALE = os.environ.get("LUBETRACK_LOCALE", "en")
DEFAULT_USER = os.environ.get("LUBETRACK_USER", "Operator")

logger = logging.getLogger("cli")


def build_context(store, advisor=None, ctx=None) -> dict:
    """Depo uzerinde tum servisleri ve calisma kumesi dinleyicisini kurar.

    ctx verilirse yerinde guncellenir (baglan komutu).
    """
    ctx = ctx if ctx is not None else {}
    ctx.update({
        "store": store,
        "records": MaintenanceRecordService(store),
        "ledger": StockLedger(store),
        "settings": SettingsService(store),
        "sop": SOPLibrary(store),
        "advisor": advisor or MaintenanceAdvisor(region_name=REGION),
        "working_set": None,
    })

    def on_reload(working_set):
        ctx["working_set"] = working_set

    ctx["listener"] = ChangeListener(store, on_reload)
    return ctx


async def current_working_set(ctx) -> WorkingSet:
    """Son yuklenen calisma kumesini dondurur, yoksa yukler."""
    if ctx["working_set"] is None:
        await ctx["listener"].notify()
    return ctx["working_set"]


async def connect(config=None):
    """Depoyu olusturur; uzak depo erisilemiyorsa 'bagli degil' durumunda kalir."""
    store = build_store(config)
    if isinstance(store, DynamoDBStore):
        ok = await store.check_connection()
        if not ok:
            logger.warning("DynamoDB'ye ulasilamadi, depo bagli degil")
    return store


def connection_label(store) -> str:
    if not store.connected:
        return f"🔴 bağlı değil ({store.name})"
    return f"🟢 bağlı ({store.name})"


def _ask(message: str) -> bool:
    try:
        return input(f"{message} [e/h]: ").strip().lower() in ("e", "evet", "y", "yes")
    except (EOFError, KeyboardInterrupt):
        return False


# ============================================================
# Komutlar
# ============================================================

async def cmd_durum(ctx, args):
    ws = await current_working_set(ctx)
    summary = status_summary(ws.equipment)
    low = [i for i in ws.inventory if i.is_low_stock]
    lines = [
        f"Depo: {connection_label(ctx['store'])}",
        f"Ekipman: {len(ws.equipment)}  (gecikmiş {summary['OVERDUE']}, bugün {summary['DUE']}, "
        f"zamanında {summary['OK']})",
    ]
    if low:
        lines.append("⚠️  Düşük stok:")
        lines.extend(f"  {i.name}: {i.stock:g} {i.unit} (min {i.min_threshold:g})" for i in low)
    return "\n".join(lines)


async def cmd_yenile(ctx, args):
    ws = await ctx["listener"].notify()
    if ws is None:
        return "Dinleyici kapalı."
    return (
        f"🔄 Yeniden yüklendi: {len(ws.equipment)} ekipman, {len(ws.inventory)} malzeme, "
        f"{len(ws.transactions)} hareket, {len(ws.records)} bakım kaydı"
    )


async def cmd_gorevler(ctx, args):
    tasks = await ctx["records"].due_tasks()
    if not tasks:
        return "✅ Bugün için bekleyen bakım yok."
    lines = [f"📋 Bekleyen görevler ({len(tasks)}):"]
    for e in tasks:
        mark = "🔴" if classify_status(e.next_service_date).value == "OVERDUE" else "🟡"
        lines.append(f"  {mark} [{e.id}] {e.name} - {e.location} - {e.lubricant} (plan {e.next_service_date})")
    return "\n".join(lines)


async def cmd_tamamla(ctx, args):
    if not args:
        return "Kullanım: tamamla <ekipman_id> [tarih] [sonraki_tarih]"
    performed = args[1] if len(args) >= 2 else date.today().isoformat()
    next_date = args[2] if len(args) >= 3 else None
    try:
        record = await ctx["records"].complete_task(
            args[0], performed, next_date=next_date, performer=DEFAULT_USER
        )
    except PartialFailureError as e:
        return f"⚠️  Kayıt yazıldı ({e.persisted.id}) ama ekipman takvimi güncellenemedi: {e}"
    equipment = await ctx["records"].get_equipment(record.equipment_id)
    return f"✅ {record.equipment_name} tamamlandı ({record.performed_date}), sonraki bakım {equipment.next_service_date}"


async def cmd_stok(ctx, args):
    items = await ctx["ledger"].list_items()
    if not items:
        return "Malzeme yok."
    lines = ["📦 Malzemeler:"]
    for i in items:
        flag = " ⚠️" if i.is_low_stock else ""
        lines.append(f"  [{i.id}] {i.name} ({i.type}): {i.stock:g} {i.unit}{flag}")
    return "\n".join(lines)


async def _movement(ctx, args, direction):
    if len(args) < 2:
        return f"Kullanım: {'giris' if direction == 'IN' else 'cikis-stok'} <malzeme_id> <miktar> [kullanıcı]"
    try:
        amount = float(args[1])
    except ValueError:
        return f"❌ Geçersiz miktar: {args[1]}"
    user = " ".join(args[2:]) or DEFAULT_USER
    tx = await ctx["ledger"].record_transaction(args[0], direction, amount, user)
    item = await ctx["ledger"].get_item(tx.inventory_id)
    return f"✅ {tx.inventory_name}: {tx.direction.value} {tx.amount:g} -> stok {item.stock:g} {item.unit}"


async def cmd_giris(ctx, args):
    return await _movement(ctx, args, "IN")


async def cmd_cikis_stok(ctx, args):
    return await _movement(ctx, args, "OUT")


async def cmd_hareketler(ctx, args):
    txs = await ctx["ledger"].list_transactions(args[0] if args else None)
    if not txs:
        return "Hareket yok."
    lines = ["🧾 Son hareketler:"]
    for t in txs[:20]:
        lines.append(f"  [{t.id}] {t.timestamp[:16]} {t.inventory_name} {t.direction.value} {t.amount:g} ({t.user})")
    return "\n".join(lines)


async def cmd_sil_hareket(ctx, args, confirm=_ask):
    if not args:
        return "Kullanım: sil-hareket <hareket_id>"
    if not confirm(f"Hareket {args[0]} silinecek ve stok geri alınacak. Emin misiniz?"):
        return "İptal edildi."
    await ctx["ledger"].delete_transaction(args[0])
    return f"🗑️  Hareket silindi: {args[0]}"


async def cmd_temizle(ctx, args, confirm=_ask):
    settings = await ctx["settings"].get()
    if settings.photo_retention_days <= 0:
        return "Fotoğraf saklama süresi tanımlı değil (0 = süresiz)."
    if not confirm(f"{settings.photo_retention_days} günden eski fotoğraflar silinecek. Emin misiniz?"):
        return "İptal edildi."
    removed = await ctx["settings"].run_retention_sweep(ctx["records"])
    return f"🧹 {removed} fotoğraf silindi."


async def cmd_dogrula(ctx, args):
    report = await ctx["ledger"].verify_ledger()
    if report["all_valid"]:
        return f"✅ Defter tutarlı ({report['items_checked']} malzeme)."
    lines = [f"❌ {report['discrepancies_found']} malzemede tutarsızlık:"]
    for d in report["discrepancies"]:
        lines.append(f"  {d['name']}: beklenen {d['expected']:g}, mevcut {d['actual']:g}")
    return "\n".join(lines)


async def cmd_danis(ctx, args):
    if not args:
        return "Kullanım: danis <soru>"
    equipment = await ctx["records"].list_equipment()
    return await ctx["advisor"].get_advice(" ".join(args), equipment, locale=LOCALE)


async def cmd_risk(ctx, args):
    equipment = await ctx["records"].list_equipment()
    return await ctx["advisor"].summarize_risk(equipment, locale=LOCALE)


async def cmd_disa_aktar(ctx, args):
    kind = args[0] if args else ""
    today = date.today().isoformat()
    if kind == "gorevler":
        content = due_tasks_csv(await ctx["records"].list_equipment(), today)
        default = f"Lubrication_Tasks_{today}.csv"
    elif kind == "stok":
        content = stock_log_csv(await ctx["ledger"].list_transactions())
        default = f"Inventory_Log_{today}.csv"
    elif kind == "gecmis":
        content = history_report_html(await ctx["records"].list_records(), today)
        default = f"Lubrication_History_{today}.html"
    else:
        return "Kullanım: disa-aktar <gorevler|stok|gecmis> [dosya]"
    path = write_export(args[1] if len(args) >= 2 else default, content)
    return f"📤 Yazıldı: {path}"


async def cmd_baglan(ctx, args):
    if len(args) < 2:
        return "Kullanım: baglan <region> <tablo_öneki> [endpoint_url]"
    config = StoreConfig(region=args[0], table_prefix=args[1], endpoint_url=args[2] if len(args) >= 3 else None)
    LocalOverrideProvider().save(config)
    store = await connect(config)
    ctx["listener"].close()
    build_context(store, ctx.get("advisor"), ctx)
    return f"Depo: {connection_label(store)}"


COMMANDS = {
    "durum": cmd_durum,
    "yenile": cmd_yenile,
    "gorevler": cmd_gorevler,
    "tamamla": cmd_tamamla,
    "stok": cmd_stok,
    "giris": cmd_giris,
    "cikis-stok": cmd_cikis_stok,
    "hareketler": cmd_hareketler,
    "sil-hareket": cmd_sil_hareket,
    "temizle": cmd_temizle,
    "dogrula": cmd_dogrula,
    "danis": cmd_danis,
    "risk": cmd_risk,
    "disa-aktar": cmd_disa_aktar,
    "baglan": cmd_baglan,
}

DESTRUCTIVE = {"sil-hareket", "temizle"}

# Basarili calisinca calisma kumesini yeniden yukleyen komutlar
MUTATING = {
    "tamamla": Collection.RECORDS,
    "giris": Collection.TRANSACTIONS,
    "cikis-stok": Collection.TRANSACTIONS,
    "sil-hareket": Collection.TRANSACTIONS,
    "temizle": Collection.RECORDS,
}


async def handle_command(line, ctx, confirm=_ask):
    """Komutu calistirir; bilinmeyen komutlarda None dondurur."""
    try:
        parts = shlex.split(line)
    except ValueError as e:
        return f"❌ Komut okunamadı: {e}"
    if not parts:
        return ""

    action, args = parts[0].lower(), parts[1:]
    handler = COMMANDS.get(action)
    if handler is None:
        return None
    try:
        if action in DESTRUCTIVE:
            result = await handler(ctx, args, confirm=confirm)
        else:
            result = await handler(ctx, args)
        if action in MUTATING:
            await ctx["listener"].notify(MUTATING[action])
        return result
    except LubeTrackError as e:
        logger.info("Komut hatasi [%s]: %s", action, e)
        return f"❌ {e}"


# ============================================================
# Main
# ============================================================

HELP_TEXT = """
╔══════════════════════════════════════════════════════════╗
║  🛢️  Yağlama Bakım Takibi                                ║
╠══════════════════════════════════════════════════════════╣
║  durum                          - Genel durum            ║
║  yenile                         - Veriyi yeniden yükle   ║
║  gorevler                       - Bugün yapılacaklar     ║
║  tamamla <id> [tarih] [sonraki] - Bakımı tamamla         ║
║  stok                           - Malzeme listesi        ║
║  giris <id> <miktar> [kişi]     - Stok girişi            ║
║  cikis-stok <id> <miktar> [kişi]- Stok çıkışı            ║
║  hareketler [malzeme_id]        - Hareket geçmişi        ║
║  sil-hareket <id>               - Hareketi sil           ║
║  temizle                        - Eski fotoğrafları sil  ║
║  dogrula                        - Defteri doğrula        ║
║  danis <soru>                   - AI danışman            ║
║  risk                           - AI risk özeti          ║
║  disa-aktar <gorevler|stok|gecmis> [dosya]               ║
║  baglan <region> <önek>         - Uzak depoya bağlan     ║
║  yardim / help                  - Bu menüyü göster       ║
║  cikis / exit                   - Çıkış                  ║
╚══════════════════════════════════════════════════════════╝
"""


async def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(name)s] %(levelname)s: %(message)s")
    logging.getLogger("botocore").setLevel(logging.WARNING)

    print("🛢️  Yağlama Bakım Takibi")
    print("=" * 58)

    try:
        store = await connect(resolve_store_config())
        ctx = build_context(store)
        print(f"Depo: {connection_label(store)}")
        removed = await ctx["settings"].run_retention_sweep(ctx["records"]) if store.connected else 0
    except LubeTrackError as e:
        print(f"❌ Baslatma hatasi: {e}")
        sys.exit(1)

    if removed:
        print(f"🧹 Saklama süresi dolan {removed} fotoğraf silindi")
    print(HELP_TEXT)

    while True:
        try:
            user_input = input("\n🔧 > ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n👋 Gorusuruz!")
            break

        if not user_input:
            continue

        if user_input.lower() in ("çıkış", "cikis", "exit", "quit", "q"):
            print("👋 Gorusuruz!")
            break

        if user_input.lower() in ("yardım", "yardim", "help", "h"):
            print(HELP_TEXT)
            continue

        result = await handle_command(user_input, ctx)
        if result is None:
            print("❓ Bilinmeyen komut. 'yardim' yazın.")
        else:
            print(result)


if __name__ == "__main__":
    asyncio.run(main())
