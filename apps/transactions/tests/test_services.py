import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import patch

from django.core import mail
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile

from apps.activity.models import ActivityAction, EntityType, ActivityLog
from apps.catalogs.models import CatalogType, Concept, Description
from apps.notifications.models import NotificationSettings
from apps.transactions.models import (
    Transaction,
    Payment,
    PaymentStatus,
    TransactionAuditLog,
    AuditAction,
)
from apps.transactions.services import (
    DELETED,
    DEACTIVATED,
    derive_status,
    to_money,
    add_payment,
    remove_payment,
    list_payments,
    recompute,
    create_transaction,
    update_transaction,
    delete_transaction,
)
from apps.transactions.services.exceptions import (
    TransactionValidationError,
    TransactionNotFoundError,
    PaymentNotFoundError,
    PermissionDeniedError,
)


def _pay(tx, amount, user=None, **kwargs):
    return add_payment(
        transaction_id=tx.id,
        amount=Decimal(amount),
        date=date(2024, 3, 10),
        user=user,
        **kwargs
    )


# =============================================================================
# Status derivation
# =============================================================================

class TestDeriveStatus:
    """Tests for derive_status"""

    @pytest.mark.parametrize('amount, paid, expected', [
        ('1000.00', '0', PaymentStatus.PENDIENTE),
        ('1000.00', '0.01', PaymentStatus.PARCIAL),
        ('1000.00', '999.99', PaymentStatus.PARCIAL),
        ('1000.00', '1000.00', PaymentStatus.PAGADO),
        ('1000.00', '1000.01', PaymentStatus.PAGADO),
        ('0.00', '0.00', PaymentStatus.PENDIENTE),
        ('0.30', '0.30', PaymentStatus.PAGADO),
        ('1.00', '0.001', PaymentStatus.PARCIAL),
        ('1000.00', '999.995', PaymentStatus.PARCIAL),
        ('1000.00', '999.9999', PaymentStatus.PARCIAL),
        ('1000.005', '1000.00', PaymentStatus.PARCIAL),
    ])
    def test_status_grid(self, amount, paid, expected):
        """Status follows paid vs amount with exact decimal comparison."""
        assert derive_status(Decimal(amount), Decimal(paid)) == expected

    def test_float_input_goes_through_str(self):
        """0.1 + 0.2 paid against 0.30 counts as fully paid."""
        assert derive_status('0.30', 0.1 + 0.2) == PaymentStatus.PAGADO


class TestToMoney:
    """Tests for to_money"""

    @pytest.mark.parametrize('value, expected', [
        ('10.5', Decimal('10.50')),
        ('10.500', Decimal('10.50')),
        (7, Decimal('7.00')),
        (Decimal('0.01'), Decimal('0.01')),
    ])
    def test_valid_amounts(self, value, expected):
        """Amounts with at most two significant decimals are kept as cents."""
        assert to_money(value) == expected

    @pytest.mark.parametrize('value', ['10.005', '0.001', Decimal('99.999')])
    def test_sub_cent_amounts_rejected(self, value):
        """Sub-cent digits are rejected, never rounded."""
        with pytest.raises(ValueError):
            to_money(value)

    @pytest.mark.parametrize('value', ['abc', 'NaN', 'Infinity', None])
    def test_non_numeric_rejected(self, value):
        """Non-finite and non-numeric values are rejected."""
        with pytest.raises(ValueError):
            to_money(value)


# =============================================================================
# Payment ledger
# =============================================================================

@pytest.mark.django_db
class TestAddPayment:
    """Tests for add_payment"""

    def test_partial_then_full_payment(self, expense, accountant):
        """400 leaves it parcial, 600 more pays it off, 0.01 more is rejected."""
        _pay(expense, '400.00', accountant)
        expense.refresh_from_db()
        assert expense.status == PaymentStatus.PARCIAL
        assert expense.balance == Decimal('600.00')

        _pay(expense, '600.00', accountant)
        expense.refresh_from_db()
        assert expense.status == PaymentStatus.PAGADO
        assert expense.balance == Decimal('0.00')
        assert expense.total_paid == Decimal('1000.00')

        with pytest.raises(TransactionValidationError) as exc_info:
            _pay(expense, '0.01', accountant)
        assert exc_info.value.field == 'amount'
        assert expense.payments.count() == 2

    @pytest.mark.parametrize('amount', ['0', '-5.00'])
    def test_non_positive_amount_rejected(self, expense, amount):
        """Zero and negative payments are rejected."""
        with pytest.raises(TransactionValidationError):
            _pay(expense, amount)

        assert not Payment.objects.exists()

    def test_sub_cent_amount_rejected(self, expense):
        """A payment of 10.005 is rejected instead of being rounded to 10.01."""
        with pytest.raises(TransactionValidationError) as exc_info:
            _pay(expense, '10.005')

        assert exc_info.value.field == 'amount'
        assert not Payment.objects.filter(transaction=expense).exists()

    def test_unknown_transaction(self, db):
        """Paying a missing transaction raises not found."""
        with pytest.raises(TransactionNotFoundError):
            add_payment(
                transaction_id='00000000-0000-0000-0000-000000000000',
                amount=Decimal('10.00'),
                date=date(2024, 1, 1),
            )

    def test_inactive_transaction(self, expense):
        """Soft-deleted transactions don't take payments."""
        Transaction.objects.filter(id=expense.id).update(is_active=False)

        with pytest.raises(TransactionNotFoundError):
            _pay(expense, '10.00')

    def test_list_newest_first(self, expense):
        """Payments are listed newest first."""
        first = _pay(expense, '100.00')
        second = _pay(expense, '200.00')

        assert list(list_payments(expense.id)) == [second, first]

    def test_attachment_stored(self, expense):
        """A valid receipt is stored under the transaction's folder."""
        receipt = SimpleUploadedFile('recibo.pdf', b'%PDF-1.4 test', content_type='application/pdf')

        payment = _pay(expense, '100.00', files=[receipt])

        assert len(payment.attachments) == 1
        record = payment.attachments[0]
        assert record['file_type'] == 'application/pdf'
        assert record['file_name'].endswith('_recibo.pdf')
        assert default_storage.exists(f"payment-attachments/{expense.id}/{record['file_name']}")

    def test_attachment_wrong_type_rejected(self, expense):
        """Only JPEG, PNG and PDF are accepted."""
        upload = SimpleUploadedFile('notas.txt', b'hola', content_type='text/plain')

        with pytest.raises(TransactionValidationError) as exc_info:
            _pay(expense, '100.00', files=[upload])

        assert exc_info.value.field == 'attachments'
        assert not Payment.objects.exists()

    def test_attachment_too_large_rejected(self, expense, settings):
        """Payment receipts are capped at the configured size."""
        settings.PAYMENT_ATTACHMENT_MAX_SIZE = 10
        upload = SimpleUploadedFile('foto.png', b'x' * 11, content_type='image/png')

        with pytest.raises(TransactionValidationError):
            _pay(expense, '100.00', files=[upload])

    def test_storage_failure_does_not_block_payment(self, expense):
        """Upload errors are logged and the payment is still recorded."""
        receipt = SimpleUploadedFile('recibo.pdf', b'%PDF', content_type='application/pdf')

        with patch.object(default_storage, 'save', side_effect=OSError('disk full')):
            payment = _pay(expense, '100.00', files=[receipt])

        assert payment.attachments == []
        assert Payment.objects.filter(id=payment.id).exists()

    def test_admins_notified_after_commit(self, expense, django_capture_on_commit_callbacks):
        """Admin recipients get an email once the payment commits."""
        NotificationSettings.objects.create(admin_emails=['tesoreria@example.com'])

        with django_capture_on_commit_callbacks(execute=True):
            _pay(expense, '400.00')

        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ['tesoreria@example.com']
        assert 'Se ha registrado un pago de $400.00' in mail.outbox[0].subject


@pytest.mark.django_db
class TestRemovePayment:
    """Tests for remove_payment"""

    def test_removing_only_payment_returns_to_pendiente(self, expense, admin_user):
        """A paid-off transaction goes back to pendiente when its payment is removed."""
        payment = _pay(expense, '1000.00')

        summary = remove_payment(payment_id=payment.id, user=admin_user)

        expense.refresh_from_db()
        assert summary['status'] == PaymentStatus.PENDIENTE
        assert expense.status == PaymentStatus.PENDIENTE
        assert expense.balance == Decimal('1000.00')

    def test_removing_one_of_two_leaves_parcial(self, expense, admin_user):
        """With another payment left the status is parcial."""
        _pay(expense, '300.00')
        second = _pay(expense, '700.00')

        summary = remove_payment(payment_id=second.id, user=admin_user)

        assert summary['status'] == PaymentStatus.PARCIAL
        assert summary['total_paid'] == Decimal('300.00')
        assert summary['balance'] == Decimal('700.00')

    def test_contador_cannot_remove(self, expense, accountant):
        """Removing payments needs delete_payments."""
        payment = _pay(expense, '100.00')

        with pytest.raises(PermissionDeniedError):
            remove_payment(payment_id=payment.id, user=accountant)

        assert Payment.objects.filter(id=payment.id).exists()

    def test_unknown_payment(self, admin_user):
        """Removing a missing payment raises not found."""
        with pytest.raises(PaymentNotFoundError):
            remove_payment(payment_id='00000000-0000-0000-0000-000000000000', user=admin_user)

    def test_attachments_deleted_after_commit(self, expense, admin_user, django_capture_on_commit_callbacks):
        """Stored receipts are removed once the deletion commits."""
        receipt = SimpleUploadedFile('recibo.pdf', b'%PDF', content_type='application/pdf')
        payment = _pay(expense, '100.00', files=[receipt])
        path = f"payment-attachments/{expense.id}/{payment.attachments[0]['file_name']}"

        with django_capture_on_commit_callbacks(execute=True):
            remove_payment(payment_id=payment.id, user=admin_user)

        assert not default_storage.exists(path)


# =============================================================================
# Status updater
# =============================================================================

@pytest.mark.django_db
class TestRecompute:
    """Tests for recompute"""

    def test_second_call_writes_nothing(self, expense):
        """Recomputing an up-to-date transaction issues no write."""
        _pay(expense, '250.00')
        first = recompute(expense.id)

        with patch.object(Transaction, 'save') as save_mock:
            second = recompute(expense.id)

        save_mock.assert_not_called()
        assert first == second

    def test_repairs_stale_status(self, expense):
        """A stale stored status is corrected from the payments."""
        _pay(expense, '1000.00')
        Transaction.objects.filter(id=expense.id).update(
            status=PaymentStatus.PENDIENTE,
            total_paid=Decimal('0.00'),
        )

        summary = recompute(expense.id)

        expense.refresh_from_db()
        assert summary['status'] == PaymentStatus.PAGADO
        assert expense.status == PaymentStatus.PAGADO
        assert expense.total_paid == Decimal('1000.00')

    def test_missing_transaction(self, db):
        """Recomputing a missing transaction raises not found."""
        with pytest.raises(TransactionNotFoundError):
            recompute('00000000-0000-0000-0000-000000000000')


# =============================================================================
# Transaction management
# =============================================================================

@pytest.mark.django_db
class TestCreateTransaction:
    """Tests for create_transaction"""

    def test_new_transaction_is_pendiente(self, expense):
        """New records start pendiente with the full amount as balance."""
        assert expense.status == PaymentStatus.PENDIENTE
        assert expense.balance == Decimal('1000.00')
        assert expense.total_paid == Decimal('0.00')

    def test_audit_entry_written(self, expense, accountant):
        """Creation is recorded in the audit log."""
        entry = TransactionAuditLog.objects.get(transaction_id=expense.id)

        assert entry.action == AuditAction.CREATED
        assert entry.user == accountant
        assert entry.snapshot['amount'] == '1000.00'

    def test_sub_cent_amount_rejected(self, general, concept, provider):
        """Amounts with sub-cent digits are rejected, not rounded."""
        with pytest.raises(TransactionValidationError) as exc_info:
            create_transaction(
                type='salida',
                amount='99.999',
                date=date(2024, 3, 1),
                general_id=general.id,
                concept_id=concept.id,
                provider_id=provider.id,
                notify=False,
            )

        assert exc_info.value.field == 'amount'
        assert not Transaction.objects.exists()

    def test_expense_requires_provider(self, general, concept):
        """Salida without provider is rejected."""
        with pytest.raises(TransactionValidationError) as exc_info:
            create_transaction(
                type='salida',
                amount=Decimal('50.00'),
                date=date(2024, 3, 1),
                general_id=general.id,
                concept_id=concept.id,
            )

        assert exc_info.value.field == 'provider'

    def test_income_without_provider(self, income):
        """Entrada doesn't need a provider."""
        assert income.provider is None
        assert income.status == PaymentStatus.PENDIENTE

    def test_concept_must_belong_to_general(self, income_general, concept, provider):
        """Concept from another general is rejected."""
        with pytest.raises(TransactionValidationError) as exc_info:
            create_transaction(
                type='entrada',
                amount=Decimal('50.00'),
                date=date(2024, 3, 1),
                general_id=income_general.id,
                concept_id=concept.id,
            )

        assert exc_info.value.field == 'concept'

    def test_general_must_apply_to_type(self, general, concept, provider):
        """A salida general can't classify an entrada."""
        with pytest.raises(TransactionValidationError) as exc_info:
            create_transaction(
                type='entrada',
                amount=Decimal('50.00'),
                date=date(2024, 3, 1),
                general_id=general.id,
                concept_id=concept.id,
            )

        assert exc_info.value.field == 'general'

    def test_inactive_concept_rejected(self, general, concept, provider):
        """Inactive catalog entries can't be used."""
        concept.is_active = False
        concept.save()

        with pytest.raises(TransactionValidationError):
            create_transaction(
                type='salida',
                amount=Decimal('50.00'),
                date=date(2024, 3, 1),
                general_id=general.id,
                concept_id=concept.id,
                provider_id=provider.id,
            )

    def test_accountants_notified_of_expense(
        self, general, concept, provider, django_capture_on_commit_callbacks
    ):
        """New expenses are sent to the accountant recipients."""
        NotificationSettings.objects.create(accountant_emails=['contador@example.com'])

        with django_capture_on_commit_callbacks(execute=True):
            tx = create_transaction(
                type='salida',
                amount=Decimal('80.00'),
                date=date(2024, 3, 1),
                general_id=general.id,
                concept_id=concept.id,
                provider_id=provider.id,
            )

        assert len(mail.outbox) == 1
        assert mail.outbox[0].subject.startswith('Favor de cubrir este gasto - Arbitraje')
        assert str(tx.id).replace('-', '')[-8:] in mail.outbox[0].subject


@pytest.mark.django_db
class TestUpdateTransaction:
    """Tests for update_transaction"""

    def test_amount_below_paid_rejected(self, expense):
        """The amount can't drop below what's been paid."""
        _pay(expense, '400.00')

        with pytest.raises(TransactionValidationError):
            update_transaction(transaction_id=expense.id, amount=Decimal('300.00'))

    def test_amount_change_recomputes_status(self, expense, accountant):
        """Lowering the amount to what's paid makes it pagado."""
        _pay(expense, '400.00')

        tx = update_transaction(transaction_id=expense.id, user=accountant, amount=Decimal('400.00'))

        assert tx.status == PaymentStatus.PAGADO
        assert tx.balance == Decimal('0.00')
        entry = TransactionAuditLog.objects.get(transaction_id=expense.id, action=AuditAction.UPDATED)
        assert entry.snapshot['before']['amount'] == '1000.00'

    def test_type_cannot_change(self, expense):
        """Non-editable fields are ignored."""
        tx = update_transaction(transaction_id=expense.id, type='entrada', description='Nueva')

        assert tx.type == 'salida'
        assert tx.description == 'Nueva'


@pytest.mark.django_db
class TestDeleteTransaction:
    """Tests for delete_transaction"""

    def test_reason_required(self, expense, admin_user):
        """Deleting without a reason is rejected."""
        with pytest.raises(TransactionValidationError) as exc_info:
            delete_transaction(transaction_id=expense.id, user=admin_user, reason='  ')

        assert exc_info.value.field == 'reason'

    def test_without_payments_is_deleted(self, expense, admin_user):
        """No payments: the row is removed, the audit entry stays."""
        result = delete_transaction(transaction_id=expense.id, user=admin_user, reason='Duplicado')

        assert result == DELETED
        assert not Transaction.objects.filter(id=expense.id).exists()
        entry = TransactionAuditLog.objects.get(transaction_id=expense.id, action=AuditAction.DELETED)
        assert entry.reason == 'Duplicado'
        assert entry.user == admin_user

    def test_with_payments_is_deactivated(self, expense, admin_user):
        """With payments the row is only deactivated."""
        _pay(expense, '100.00')

        result = delete_transaction(transaction_id=expense.id, user=admin_user, reason='Cancelado')

        expense.refresh_from_db()
        assert result == DEACTIVATED
        assert expense.is_active is False
        assert expense.payments.count() == 1

    def test_contador_cannot_delete(self, expense, accountant):
        """Deleting transactions needs delete_transactions."""
        with pytest.raises(PermissionDeniedError):
            delete_transaction(transaction_id=expense.id, user=accountant, reason='x')


# =============================================================================
# Preset descriptions
# =============================================================================

@pytest.mark.django_db
class TestDescriptionItem:
    """Tests for the preset description a transaction can point at"""

    def test_create_with_description_of_concept(self, general, concept, provider, preset_description):
        """A description of the chosen concept is accepted."""
        tx = create_transaction(
            type='salida',
            amount=Decimal('300.00'),
            date=date(2024, 3, 1),
            general_id=general.id,
            concept_id=concept.id,
            description_id=preset_description.id,
            provider_id=provider.id,
            notify=False,
        )

        assert tx.description_item == preset_description
        entry = TransactionAuditLog.objects.get(transaction_id=tx.id)
        assert entry.snapshot['description_item_id'] == str(preset_description.id)

    def test_description_of_other_concept_rejected(self, general, concept, provider):
        """The description must belong to the transaction's concept."""
        other = Concept.objects.create(general=general, name='Luz', type=CatalogType.SALIDA)
        foreign = Description.objects.create(concept=other, name='Recibo CFE')

        with pytest.raises(TransactionValidationError) as exc_info:
            create_transaction(
                type='salida',
                amount=Decimal('300.00'),
                date=date(2024, 3, 1),
                general_id=general.id,
                concept_id=concept.id,
                description_id=foreign.id,
                provider_id=provider.id,
            )

        assert exc_info.value.field == 'description_item'

    def test_inactive_description_rejected(self, general, concept, provider, preset_description):
        """Deactivated descriptions can't be picked."""
        preset_description.is_active = False
        preset_description.save()

        with pytest.raises(TransactionValidationError) as exc_info:
            create_transaction(
                type='salida',
                amount=Decimal('300.00'),
                date=date(2024, 3, 1),
                general_id=general.id,
                concept_id=concept.id,
                description_id=preset_description.id,
                provider_id=provider.id,
            )

        assert exc_info.value.detail == {'description_item': ['Description not found or inactive']}

    def test_update_sets_description(self, expense, preset_description):
        """An existing transaction can pick a description later."""
        tx = update_transaction(transaction_id=expense.id, description_item_id=preset_description.id)

        assert tx.description_item == preset_description

    def test_update_concept_checks_kept_description(self, expense, general, preset_description):
        """Moving to another concept can't keep the old concept's description."""
        update_transaction(transaction_id=expense.id, description_item_id=preset_description.id)
        other = Concept.objects.create(general=general, name='Luz', type=CatalogType.SALIDA)

        with pytest.raises(TransactionValidationError) as exc_info:
            update_transaction(transaction_id=expense.id, concept_id=other.id)

        assert exc_info.value.field == 'description_item'

    def test_update_clears_description(self, expense, preset_description):
        """Passing None removes the description."""
        update_transaction(transaction_id=expense.id, description_item_id=preset_description.id)

        tx = update_transaction(transaction_id=expense.id, description_item_id=None)

        assert tx.description_item is None


# =============================================================================
# Activity log
# =============================================================================

@pytest.mark.django_db
class TestTransactionActivity:
    """Transaction and payment changes leave activity entries"""

    def test_create_is_logged(self, expense, accountant):
        """New records are logged with their id and amount."""
        entry = ActivityLog.objects.get(entity_type=EntityType.TRANSACTION)

        assert entry.action == ActivityAction.CREATE
        assert entry.entity_id == str(expense.id)
        assert entry.user == accountant
        assert entry.details == 'Created salida of $1,000.00'

    def test_update_is_logged(self, expense, accountant):
        """Updates name the fields that changed."""
        update_transaction(transaction_id=expense.id, user=accountant, division='Femenil')

        entry = ActivityLog.objects.get(action=ActivityAction.UPDATE)
        assert entry.data == {'fields': ['division']}

    def test_payment_add_and_remove_logged(self, expense, accountant, admin_user):
        """Payments are logged on their own entity type."""
        payment = _pay(expense, '250.00', user=accountant)
        remove_payment(payment_id=payment.id, user=admin_user)

        entries = ActivityLog.objects.filter(entity_type=EntityType.PAYMENT).order_by('id')
        assert [e.action for e in entries] == [ActivityAction.CREATE, ActivityAction.DELETE]
        assert {e.entity_id for e in entries} == {str(payment.id)}
        assert entries[0].data['status'] == PaymentStatus.PARCIAL
        assert entries[1].data['status'] == PaymentStatus.PENDIENTE

    def test_delete_keeps_reason(self, expense, admin_user):
        """Deletes are logged with the reason given."""
        delete_transaction(transaction_id=expense.id, user=admin_user, reason='Duplicado')

        entry = ActivityLog.objects.get(action=ActivityAction.DELETE)
        assert entry.data['reason'] == 'Duplicado'
        assert entry.data['snapshot']['amount'] == '1000.00'

    def test_deactivate_is_logged(self, expense, admin_user):
        """Records with payments are logged as deactivated."""
        _pay(expense, '100.00')

        delete_transaction(transaction_id=expense.id, user=admin_user, reason='Cancelado')

        assert ActivityLog.objects.filter(
            action=ActivityAction.DEACTIVATE,
            entity_id=str(expense.id),
        ).exists()

    def test_rejected_payment_not_logged(self, expense):
        """Nothing is logged for a payment that fails validation."""
        with pytest.raises(TransactionValidationError):
            _pay(expense, '5000.00')

        assert not ActivityLog.objects.filter(entity_type=EntityType.PAYMENT).exists()
