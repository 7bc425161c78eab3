"""
Seed script: Populate a demo store tenant with realistic data.

What it creates:
- Tenant + ADMIN user and a CASHIER user with known credentials.
- Clients (~40) with CC or NIT (with valid DV).
- Products (default 200) with unique SKUs, price, cost and initial stock.
- Invoices (default 150) through the invoice engine, so stock is decremented
  exactly like a real sale; mix of ISSUED/PAID/DRAFT, some with IVA.

Run from the project root:
    python scripts/seed_demo_data.py \
        --tenant-name "Tienda Demo" \
        --email admin@tiendademo.com \
        --password TiendaDemo!2025 \
        --products 200 --invoices 150

Note: This is intended for development environments only.
"""

# Add project root to sys.path so `app.*` imports work even if CWD changes
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import random
from datetime import timedelta
from decimal import Decimal

from app.common.exceptions import InsufficientStockError
from app.common.time_utils import utcnow
from app.common.validators import calculate_nit_dv
from app.database.database import SessionLocal
from app.modules.auth.models import Tenant, User, UserRole
from app.modules.auth.utils import hash_password
from app.modules.clients.models import Client, DocumentType
from app.modules.invoices.models import Invoice, InvoiceStatus, PaymentMethod
from app.modules.invoices.schemas import InvoiceCreate, InvoiceItemCreate
from app.modules.invoices.service import InvoiceService
from app.modules.products.models import Product

CATEGORIES = ["Bebidas", "Lácteos", "Abarrotes", "Aseo", "Panadería", "Snacks", "Frutas", "Congelados"]
BRANDS = ["Alpina", "Colanta", "Bimbo", "Postobón", "Ramo", "Zenú", "Nutresa", "Doria", "Noel"]
FIRST_NAMES = ["Juan", "María", "Carlos", "Ana", "Luis", "Paula", "Andrés", "Camila"]
LAST_NAMES = ["Pérez", "López", "Gómez", "Rodríguez", "Martínez", "García", "Torres"]


def pick(seq):
    return random.choice(seq)


def create_tenant(db, name: str) -> Tenant:
    slug = name.lower().replace(" ", "-")
    existing = db.query(Tenant).filter(Tenant.slug == slug).first()
    if existing:
        return existing
    tenant = Tenant(name=name, slug=slug, address="Cra 1 # 2-34, Bogotá", phone=f"300{random.randint(1000000, 9999999)}")
    db.add(tenant)
    db.commit()
    return tenant


def create_user(db, tenant_id, email: str, password: str, full_name: str, role: UserRole) -> User:
    user = db.query(User).filter(User.email == email).first()
    if user:
        return user
    user = User(
        tenant_id=tenant_id,
        email=email,
        password=hash_password(password),
        full_name=full_name,
        role=role,
        is_active=True
    )
    db.add(user)
    db.commit()
    return user


def create_clients(db, tenant_id, count=40):
    clients = []
    for i in range(count):
        if i % 4 == 0:
            nit = str(random.randint(800000000, 999999999))
            client = Client(
                tenant_id=tenant_id,
                business_name=f"{pick(BRANDS)} Distribuciones {i} S.A.S.",
                document_type=DocumentType.NIT,
                identification=nit,
                nit=nit,
                dv=str(calculate_nit_dv(nit)),
                has_credit=True,
                credit_limit=Decimal(random.randint(1, 20) * 500000)
            )
        else:
            client = Client(
                tenant_id=tenant_id,
                business_name=f"{pick(FIRST_NAMES)} {pick(LAST_NAMES)}",
                document_type=DocumentType.CC,
                identification=str(random.randint(10000000, 1999999999))
            )
        db.add(client)
        clients.append(client)
    db.commit()
    return clients


def generate_sku(category: str, brand: str, idx: int) -> str:
    c = ''.join([ch for ch in category.upper() if ch.isalpha()])[:3]
    b = ''.join([ch for ch in brand.upper() if ch.isalpha()])[:3]
    return f"{c}-{b}-{idx:04d}"


def create_products(db, tenant_id, product_count=200):
    products = []
    prefix = str(tenant_id)[:4].upper()
    for i in range(product_count):
        brand = pick(BRANDS)
        category = pick(CATEGORIES)
        cost = Decimal(random.randint(100, 5000)) * Decimal(10)  # 1.000 - 50.000 COP
        margin = Decimal(random.randint(10, 35)) / Decimal(100)
        product = Product(
            tenant_id=tenant_id,
            name=f"{category} {brand} {random.randint(1, 999)}g",
            sku=f"{prefix}-{generate_sku(category, brand, i)}",
            price=(cost * (Decimal(1) + margin)).quantize(Decimal('1')),
            cost=cost,
            stock=random.randint(0, 120)
        )
        db.add(product)
        products.append(product)
    db.commit()
    return products


def create_invoices(db, tenant_id, user_id, clients, products, count=150):
    service = InvoiceService(db)
    start = db.query(Invoice).filter(Invoice.tenant_id == tenant_id).count()
    statuses = [InvoiceStatus.ISSUED] * 6 + [InvoiceStatus.PAID] * 3 + [InvoiceStatus.DRAFT]
    created = 0
    now = utcnow()

    for i in range(count):
        items = [
            InvoiceItemCreate(product_id=product.id, quantity=random.randint(1, 3))
            for product in random.sample(products, k=random.randint(1, 4))
        ]
        data = InvoiceCreate(
            number=f"FV-{start + i + 1:05d}",
            client_id=pick(clients).id if random.random() < 0.7 else None,
            items=items,
            issue_date=now - timedelta(days=random.randint(0, 330), minutes=random.randint(0, 600)),
            status=pick(statuses),
            payment_method=pick(list(PaymentMethod)),
            apply_iva=random.random() < 0.5
        )
        try:
            service.create_invoice(data, tenant_id, user_id)
            created += 1
        except InsufficientStockError:
            # Producto agotado: se omite la factura
            continue

        if created % 50 == 0:
            print(f"  Invoices created: {created}")
    return created


def main():
    parser = argparse.ArgumentParser(description="Seed demo store data")
    parser.add_argument("--tenant-name", default="Tienda Demo")
    parser.add_argument("--email", default="admin@tiendademo.com")
    parser.add_argument("--password", default="TiendaDemo!2025")
    parser.add_argument("--cashier-email", default="cajero@tiendademo.com")
    parser.add_argument("--products", type=int, default=200)
    parser.add_argument("--invoices", type=int, default=150)
    args = parser.parse_args()

    db = SessionLocal()
    try:
        tenant = create_tenant(db, args.tenant_name)
        admin = create_user(db, tenant.id, args.email, args.password, "Admin Demo", UserRole.ADMIN)
        create_user(db, tenant.id, args.cashier_email, args.password, "Cajero Demo", UserRole.CASHIER)

        print("Creating clients...")
        clients = create_clients(db, tenant.id)
        print(f"Clients: {len(clients)}")

        print("Creating products...")
        products = create_products(db, tenant.id, product_count=args.products)
        print(f"Products created: {len(products)}")

        print("Creating sales invoices (affect inventory)...")
        invoices_created = create_invoices(db, tenant.id, admin.id, clients, products, args.invoices)
        print(f"Invoices created: {invoices_created}")

        print("\nSeed completed.")
        print("Login credentials:")
        print(f"  Admin:    {args.email} / {args.password}")
        print(f"  Cashier:  {args.cashier_email} / {args.password}")
        print(f"Tenant ID: {tenant.id}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
