"""DynamoDB tablolarını kurar ve örnek veriyi yükler.

Kullanım:
    python -m data_layer.scripts.setup_aws                     # Kur ve yükle
    python -m data_layer.scripts.setup_aws --delete            # Tabloları sil
    python -m data_layer.scripts.setup_aws --region eu-west-1  # Farklı region
    python -m data_layer.scripts.setup_aws --prefix Test-      # Farklı tablo öneki
"""
import os
import sys

# Proje root'unu path'e ekle
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from data_layer.infrastructure.dynamodb_setup import (
    REGION,
    TABLE_PREFIX,
    create_tables,
    delete_tables,
    load_seed_data,
)


def main(argv=None):
    region = REGION
    prefix = TABLE_PREFIX
    delete_mode = False

    # Argümanları parse et
    args = sys.argv[1:] if argv is None else argv
    for i, arg in enumerate(args):
        if arg == "--delete":
            delete_mode = True
        elif arg == "--region" and i + 1 < len(args):
            region = args[i + 1]
        elif arg == "--prefix" and i + 1 < len(args):
            prefix = args[i + 1]

    if delete_mode:
        print("🗑️  DynamoDB tabloları siliniyor...\n")
        delete_tables(region, prefix)
        print("\n✅ Tüm tablolar silindi!")
        return

    print("=" * 60)
    print("🚀 DynamoDB Kurulumu - Yağlama Bakım Takip Sistemi")
    print(f"   Region: {region}  Tablo öneki: {prefix}")
    print("=" * 60)

    print("\n📊 ADIM 1: DynamoDB Tabloları")
    print("-" * 40)
    create_tables(region, prefix)

    print("\n📤 ADIM 2: Örnek Veri")
    print("-" * 40)
    load_seed_data(region, prefix)

    print("\n" + "=" * 60)
    print("✅ DynamoDB hazır!")
    print(f"   Uygulamayı bağlamak için: LUBETRACK_TABLE_PREFIX={prefix} AWS_DEFAULT_REGION={region}")
    print("=" * 60)


if __name__ == "__main__":
    main()
