import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('username', models.CharField(error_messages={'unique': 'A user with that username already exists.'}, help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.', max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='email address')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('role', models.CharField(choices=[('admin', 'Administrator'), ('doctor', 'Doctor'), ('patient', 'Patient')], db_index=True, default='patient', max_length=10)),
                ('national_id', models.CharField(blank=True, default='', max_length=11)),
                ('deactivation_reason', models.CharField(blank=True, default='', max_length=64)),
                ('deactivation_notes', models.TextField(blank=True, default='')),
                ('deactivated_at', models.DateTimeField(blank=True, null=True)),
                ('reactivated_at', models.DateTimeField(blank=True, null=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='provisioned_accounts', to='accounts.user')),
                ('deactivated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='accounts.user')),
                ('reactivated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='accounts.user')),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'user',
                'verbose_name_plural': 'users',
                'abstract': False,
            },
            managers=[
                ('objects', django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.AddConstraint(
            model_name='user',
            constraint=models.UniqueConstraint(condition=models.Q(('national_id', ''), _negated=True), fields=('role', 'national_id'), name='uniq_national_id_per_role'),
        ),
        migrations.AddConstraint(
            model_name='user',
            constraint=models.UniqueConstraint(condition=models.Q(('email', ''), _negated=True), fields=('role', 'email'), name='uniq_email_per_role'),
        ),
        migrations.AddConstraint(
            model_name='user',
            constraint=models.CheckConstraint(condition=models.Q(models.Q(('deactivated_at__isnull', True), ('is_active', True)), models.Q(('deactivated_at__isnull', False), ('is_active', False)), _connector='OR'), name='deactivation_matches_state'),
        ),
        migrations.CreateModel(
            name='CatalogEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('catalog', models.CharField(choices=[('specialization', 'Specialization'), ('governorate', 'Governorate'), ('education', 'Education level'), ('deactivation_reason', 'Deactivation reason')], max_length=32)),
                ('code', models.CharField(max_length=64)),
                ('name_en', models.CharField(max_length=255)),
                ('name_ar', models.CharField(blank=True, max_length=255)),
                ('version', models.CharField(max_length=32)),
                ('sort_order', models.PositiveIntegerField(default=0)),
            ],
            options={
                'indexes': [models.Index(fields=['catalog', 'version'], name='accounts_ca_catalog_5b1f0e_idx')],
                'constraints': [models.UniqueConstraint(fields=('catalog', 'version', 'code'), name='uniq_catalog_code')],
            },
        ),
        migrations.CreateModel(
            name='DoctorProfile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('license_number', models.CharField(max_length=64, unique=True)),
                ('specialization_code', models.CharField(db_index=True, max_length=64)),
                ('sub_specialization', models.CharField(blank=True, max_length=255)),
                ('governorate_code', models.CharField(db_index=True, max_length=64)),
                ('city', models.CharField(blank=True, max_length=128)),
                ('clinic_address', models.CharField(max_length=255)),
                ('phone_number', models.CharField(max_length=32)),
                ('education_code', models.CharField(blank=True, max_length=64)),
                ('years_of_experience', models.PositiveIntegerField(default=0)),
                ('institution', models.CharField(blank=True, max_length=255)),
                ('gender', models.CharField(blank=True, max_length=10)),
                ('date_of_birth', models.DateField(blank=True, null=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='doctor_profile', to='accounts.user')),
            ],
        ),
        migrations.CreateModel(
            name='PatientProfile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date_of_birth', models.DateField(blank=True, null=True)),
                ('gender', models.CharField(blank=True, max_length=10)),
                ('phone_number', models.CharField(blank=True, max_length=32)),
                ('address', models.CharField(blank=True, max_length=255)),
                ('governorate_code', models.CharField(blank=True, max_length=64)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='patient_profile', to='accounts.user')),
            ],
        ),
        migrations.CreateModel(
            name='AuditEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action_code', models.CharField(choices=[('ADD_DOCTOR', 'Add doctor'), ('DEACTIVATE_DOCTOR', 'Deactivate doctor'), ('DEACTIVATE_PATIENT', 'Deactivate patient'), ('REACTIVATE_DOCTOR', 'Reactivate doctor'), ('REACTIVATE_PATIENT', 'Reactivate patient'), ('EXPORT_DOCTORS', 'Export doctors'), ('EXPORT_PATIENTS', 'Export patients')], max_length=32)),
                ('description', models.TextField()),
                ('admin_name', models.CharField(max_length=255)),
                ('target_role', models.CharField(blank=True, default='', max_length=10)),
                ('target_id', models.BigIntegerField(blank=True, null=True)),
                ('detail', models.JSONField(blank=True, default=dict)),
                ('timestamp', models.DateTimeField()),
                ('admin', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='audit_entries', to='accounts.user')),
            ],
            options={
                'indexes': [
                    models.Index(fields=['action_code', 'timestamp'], name='accounts_au_action__8c2d41_idx'),
                    models.Index(fields=['target_role', 'target_id', 'timestamp'], name='accounts_au_target__3e9a70_idx'),
                    models.Index(fields=['timestamp', 'id'], name='accounts_au_timesta_a61f5c_idx'),
                ],
            },
        ),
    ]
