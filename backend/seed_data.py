"""Seed database with demo catalogue data."""
from service_orders.config import get_settings
from service_orders.database import Database
from service_orders.models import (
    Epi, Equipment, Material, Procedure, ProcedureMaterial, TeamMember,
)


def seed():
    """Seed team, materials, equipment, PPE and procedures with their bills of materials."""
    database = Database(get_settings().DATABASE_URL)
    database.create_all()
    db = database.SessionLocal()

    try:
        team_data = [
            {'name': 'Antônio Silva', 'position': 'Encarregado', 'primary_contact': '(11) 98888-0001'},
            {'name': 'Bruno Souza', 'position': 'Encanador', 'primary_contact': '(11) 98888-0002'},
            {'name': 'Carlos Lima', 'position': 'Encanador', 'primary_contact': '(11) 98888-0003'},
            {'name': 'Diego Rocha', 'position': 'Ajudante', 'primary_contact': '(11) 98888-0004',
             'secondary_contact': '(11) 3333-0004'},
        ]
        for member_data in team_data:
            db.add(TeamMember(**member_data))

        materials_data = [
            ('Tubo PEX 16mm', 'M'),
            ('Tubo PEX 20mm', 'M'),
            ('Conexão PEX 16mm', 'UN'),
            ('Registro de gaveta 3/4"', 'UN'),
            ('Válvula de descarga', 'UN'),
            ('Fita veda rosca', 'UN'),
            ('Cola PVC', 'ML'),
            ('Argamassa', 'KG'),
        ]
        materials = {}
        for name, unit in materials_data:
            material = Material(name=name, unity_of_measure=unit)
            db.add(material)
            materials[name] = material

        equipments_data = [
            ('Furadeira de impacto', 'Furadeira 800W com jogo de brocas'),
            ('Serra copo', 'Jogo de serras copo para alvenaria'),
            ('Ferramenta de crimpagem PEX', 'Alicate de crimpagem 16-32mm'),
            ('Bomba de teste hidrostático', 'Bomba manual até 60 bar'),
        ]
        for name, description in equipments_data:
            db.add(Equipment(name=name, description=description))

        epi_data = [
            ('Capacete', 'Capacete classe B com jugular'),
            ('Luva de raspa', 'Luva de couro para manuseio'),
            ('Óculos de proteção', 'Lente incolor antirrisco'),
            ('Protetor auricular', 'Plug de silicone'),
        ]
        for name, description in epi_data:
            db.add(Epi(name=name, description=description))

        db.flush()

        procedures_data = [
            {
                'name': 'Isolar registro geral',
                'description': 'Fechar o registro e drenar a coluna',
                'estimated_time': 15,
                'ps': 'SF-06',
                'materials': [],
            },
            {
                'name': 'Trocar válvula de descarga',
                'description': 'Remover a válvula antiga e instalar a nova',
                'estimated_time': 60,
                'ps': 'SF-11',
                'materials': [('Válvula de descarga', 1), ('Fita veda rosca', 2)],
            },
            {
                'name': 'Montar ramal PEX',
                'description': 'Cortar, crimpar e fixar o ramal',
                'estimated_time': 120,
                'ps': 'SB-06',
                'materials': [('Tubo PEX 16mm', 12), ('Conexão PEX 16mm', 6)],
            },
            {
                'name': 'Teste de estanqueidade',
                'description': 'Pressurizar a linha e verificar vazamentos por 30 minutos',
                'estimated_time': 45,
                'ps': 'AC-10',
                'materials': [],
            },
        ]
        for procedure_data in procedures_data:
            bill = procedure_data.pop('materials')
            procedure = Procedure(**procedure_data)
            db.add(procedure)
            db.flush()
            for material_name, quantity in bill:
                db.add(ProcedureMaterial(
                    procedure_id=procedure.id,
                    material_id=materials[material_name].id,
                    quantity=quantity,
                ))

        db.commit()
        print("✅ Database seeded successfully!")
        print(f"  {len(team_data)} team members, {len(materials_data)} materials, "
              f"{len(equipments_data)} equipments, {len(epi_data)} PPE items, "
              f"{len(procedures_data)} procedures")

    except Exception as e:
        db.rollback()
        print(f"❌ Error seeding database: {e}")
        raise
    finally:
        db.close()
        database.dispose()


if __name__ == "__main__":
    seed()
